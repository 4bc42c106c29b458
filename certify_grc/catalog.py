"""Assessment domains and their questionnaire sections.

The catalog covers the ISO/IEC 27001:2022 clauses 4 to 10 and the Annex A
control themes A.5 to A.8. Section keys are stable: they are the keys under
which answers are persisted, so renaming one orphans stored records.
"""

from typing import Dict, List, Tuple

from .models import AssessmentDomain, AssessmentSection, UnknownDomainError


def _sections(rows: List[Tuple[str, str, str]]) -> Tuple[AssessmentSection, ...]:
    return tuple(AssessmentSection(key, title, question) for key, title, question in rows)


CONTEXT_OF_ORGANIZATION = [
    ("section1", "4.1 Understanding the organization and its context",
     "Have the external and internal issues that affect the ISMS been determined?"),
    ("section2", "4.2 Understanding the needs and expectations of interested parties",
     "Have the interested parties and their requirements been identified?"),
    ("section3", "4.3 Determining the scope of the information security management system",
     "Has the scope of the ISMS been determined and documented?"),
    ("section4", "4.4 Information security management system",
     "Is an ISMS in place and being continually improved?"),
]

LEADERSHIP = [
    ("5.1", "5.1 Leadership and commitment",
     "Does top management demonstrate leadership and commitment to the ISMS by providing resources and communicating effectively? (see list A to H)"),
    ("5.2.1", "5.2 Policy",
     "Is a documented information security policy in place?"),
    ("5.2.2", "5.2 Policy",
     "Does it set objectives for the ISMS?"),
    ("5.2.3", "5.2 Policy",
     "Does it commit the organization to satisfying requirements and continually improving the ISMS?"),
    ("5.2.4", "5.2 Policy",
     "Is it adequately communicated?"),
    ("5.3", "5.3 Organizational roles, responsibilities and authorities",
     "Are roles, responsibilities and authorities for the ISMS defined?"),
]

PLANNING = [
    ("section1", "6.1.1 Actions to address risks and opportunities",
     "Does the plan for the ISMS take into account the relevant issues and requirements?"),
    ("section2", "6.1.1 Actions to address risks and opportunities",
     "Are all of the relevant risks and opportunities determined?"),
    ("section3", "6.1.1 Actions to address risks and opportunities",
     "Are actions planned to address the identified risks and opportunities?"),
    ("section4", "6.1.2 Information security risk assessment",
     "Is a documented information security risk assessment process defined and applied?"),
    ("section5", "6.1.2 Information security risk assessment",
     "Have risk owners been identified?"),
    ("section6", "6.1.2 Information security risk assessment",
     "Have risks been analyzed, evaluated and prioritized for treatment?"),
    ("section7", "6.1.3 Information security risk treatment",
     "Is there a documented information security risk treatment process?"),
    ("section8", "6.1.3 Information security risk treatment",
     "Have appropriate risk treatment options been selected for each risk that exceeds the risk acceptance criteria?"),
    ("section9", "6.1.3 Information security risk treatment",
     "Have necessary controls been selected for each risk that requires treatment?"),
    ("section10", "6.1.3 Information security risk treatment",
     "Has a Statement of Applicability been created?"),
    ("section11", "6.1.3 Information security risk treatment",
     "Is there a plan to implement the identified treatments?"),
    ("section12", "6.2 Information security objectives and planning to achieve them",
     "Have measurable information security objectives been established and communicated?"),
    ("section13", "6.2 Information security objectives and planning to achieve them",
     "Is there a plan to achieve the defined information security objectives?"),
    ("section14", "6.3 Planning of changes",
     "Is there a process to cater for the planning of expected and unexpected changes to the ISMS?"),
]

SUPPORT = [
    ("7.2.1", "7.2 Competence",
     "Are ISMS resources determined and provided?"),
    ("7.2.2", "7.2 Competence",
     "Are all relevant people aware of the information security policy and the importance of good security?"),
    ("7.2.3", "7.2 Competence",
     "Where necessary, is action taken to improve competence and are records kept?"),
    ("7.2.4", "7.2 Competence",
     "Are all of the relevant people sufficiently competent to perform their roles?"),
    ("7.3.1", "7.3 Awareness",
     "Are all relevant people aware of the information security policy and the importance of good security?"),
    ("7.4.1", "7.4 Communication",
     "Is effective internal and external communication in place?"),
    ("7.5.1", "7.5 Documented information",
     "7.5.1 Is all of the documented information required by the standard in place?"),
    ("7.5.2", "7.5 Documented information",
     "7.5.2 Are standards used for documentation such as titles, references, format, review and approval?"),
    ("7.5.3", "7.5 Documented information",
     "7.5.3 Is the lifecycle of documented information controlled, including that from outside the organization?"),
]

OPERATION = [
    ("section1", "8.1 Operational planning and control",
     "Are planned changes controlled and the consequences of unplanned changes mitigated?"),
    ("section2", "8.1 Operational planning and control",
     "Are outsourced processes identified and controlled?"),
    ("section3", "8.2 Information security risk assessment",
     "Are documented risk assessments carried out at planned intervals and when significant change happens?"),
    ("section4", "8.3 Information security risk treatment",
     "Is the information security risk treatment plan being implemented and results documented?"),
]

PERFORMANCE_EVALUATION = [
    ("9.1.1", "9.1 Monitoring, measurement, analysis and evaluation",
     "Are the methods for monitoring, measurement, analysis and evaluation clearly defined and the results documented?"),
    ("9.1.2", "9.1 Monitoring, measurement, analysis and evaluation",
     "Is it clearly defined what needs to be monitored and measured to determine the effectiveness of the ISMS?"),
    ("9.2.1", "9.2 Internal audit",
     "Are appropriate internal audits being carried out by suitably qualified and impartial people?"),
    ("9.2.2", "9.2 Internal audit",
     "Are the audit results being communicated to management so that action can be taken?"),
    ("9.3.1", "9.3 Management review",
     "Are documented management reviews being held regularly?"),
    ("9.3.2", "9.3 Management review",
     "Are all of the topics from the standard a to f covered in each management review?"),
]

IMPROVEMENT = [
    ("continual-improvement", "10.1 Continual improvement",
     "Are all of the topics from the standard a to f covered in each management review?"),
    ("nonconformity-corrective-action", "10.2 Nonconformity and corrective action",
     "Are nonconformities being identified, documented and corrective actions taken?"),
]

ORGANIZATIONAL_CONTROLS = [
    ("A.5.1", "A.5.1 Policies for information security",
     "An appropriate set of information security policies has been approved and communicated, and reviews happen when required."),
    ("A.5.2", "A.5.2 Information security roles and responsibilities",
     "Everyone knows what their information security roles and responsibilities are."),
    ("A.5.3", "A.5.3 Segregation of duties",
     "There are no conflicts of duties that could be a risk to the organization."),
    ("A.5.4", "A.5.4 Management responsibilities",
     "Management makes sure that everyone plays their part in ensuring effective information security."),
    ("A.5.5", "A.5.5 Contact with authorities",
     "Relevant authorities are known and appropriate ways to keep in contact with them are established."),
    ("A.5.6", "A.5.6 Contact with special interest groups",
     "Relevant specialist groups are known and appropriate ways to keep in contact with them are established."),
    ("A.5.7", "A.5.7 Threat intelligence",
     "A process is in place to understand information security threats to the organization."),
    ("A.5.8", "A.5.8 Information security in project management",
     "Projects take due account of their information security responsibilities."),
    ("A.5.9", "A.5.9 Inventory of information and other assets",
     "There is an accurate list of information assets and each asset has an owner."),
    ("A.5.10", "A.5.10 Acceptable use of information and other associated assets",
     "There is a policy on how to use assets appropriately and everyone follows it."),
    ("A.5.11", "A.5.11 Return of assets",
     "Procedures are in place to ensure that assets are returned when people leave or change jobs."),
    ("A.5.12", "A.5.12 Classification of information",
     "An information classification scheme is in effect and is being used in all areas within scope."),
    ("A.5.13", "A.5.13 Labelling of information",
     "Everyone knows how to label information appropriately according to the classification scheme."),
    ("A.5.14", "A.5.14 Information transfer",
     "Ways in which information must be transferred, both internally and externally, are defined."),
    ("A.5.15", "A.5.15 Access control",
     "It is clear how access to information and other assets will be managed so that it stays secure."),
    ("A.5.16", "A.5.16 Identity management",
     "Appropriate methods are used to establish the identity of the person or system making a request."),
    ("A.5.17", "A.5.17 Authentication information",
     "Passwords and other types of authentication are managed according to a documented process."),
    ("A.5.18", "A.5.18 Access rights",
     "Access rights to assets are assigned according to a documented policy."),
    ("A.5.19", "A.5.19 Information security in supplier relationships",
     "The risks involved in dealing with suppliers are managed by the use of appropriate processes and procedures."),
    ("A.5.20", "A.5.20 Addressing information security within supplier agreements",
     "The ways in which the organization will interface with suppliers from an information security point of view are agreed."),
    ("A.5.21", "A.5.21 Managing information security in the ICT supply chain",
     "The organization's security requirements are passed down the supply chain."),
    ("A.5.22", "A.5.22 Monitoring, review and change management of supplier services",
     "A close eye is kept on whether suppliers are performing as expected and any changes are evaluated carefully."),
    ("A.5.23", "A.5.23 Information security for use of cloud services",
     "Purchase, use and management of cloud services are performed according to defined processes."),
    ("A.5.24", "A.5.24 Information security incident management planning and preparation",
     "There are defined procedures for incident management and everyone involved knows about them."),
    ("A.5.25", "A.5.25 Assessment and decision on information security events",
     "There is a process to decide whether an event should become an information security incident."),
    ("A.5.26", "A.5.26 Response to information security incidents",
     "When they happen, incidents are responded to effectively according to the documented procedures."),
    ("A.5.27", "A.5.27 Learning from information security incidents",
     "Lessons learned from incidents are fed back into the relevant processes and procedures."),
    ("A.5.28", "A.5.28 Collection of evidence",
     "Incident management procedures include methods of finding and preserving evidence where required."),
    ("A.5.29", "A.5.29 Information security during disruption",
     "When a disruptive event happens, security is not compromised."),
    ("A.5.30", "A.5.30 ICT readiness for business continuity",
     "Plans are in place to recover ICT systems in a way that meets the defined objectives of the organization."),
    ("A.5.31", "A.5.31 Legal, statutory, regulatory and contractual requirements",
     "The relevant requirements are known and are taken into account when implementing information security procedures and controls."),
    ("A.5.32", "A.5.32 Intellectual property rights",
     "Care is taken to ensure that the IP rights of others are not infringed, and to protect the organization's IP."),
    ("A.5.33", "A.5.33 Protection of records",
     "Processes are in place to protect records throughout their lifecycle."),
    ("A.5.34", "A.5.34 Privacy and protection of personally identifiable information",
     "Legal requirements for the protection of PII are understood and complied with at all times."),
    ("A.5.35", "A.5.35 Independent review of information security",
     "The approach to information security is independently reviewed on a regular basis to identify improvements."),
    ("A.5.36", "A.5.36 Compliance with policies, rules and standards for information security",
     "Management regularly checks that information security rules and controls are correctly followed by everyone."),
    ("A.5.37", "A.5.37 Documented operating procedures",
     "The correct way to perform information security activities is documented within procedures."),
]

PEOPLE_CONTROLS = [
    ("A.6.1", "A.6.1 Screening",
     "Potential employees are subject to appropriate background checks prior to employment."),
    ("A.6.2", "A.6.2 Terms and conditions of employment",
     "Appropriate information security-related wording is included in employment contracts."),
    ("A.6.3", "A.6.3 Information security awareness, education and training",
     "Awareness, education and training are conducted to make sure everyone has the skills to maintain information security."),
    ("A.6.4", "A.6.4 Disciplinary process",
     "Anyone violating information security policy is subject to a formal disciplinary process."),
    ("A.6.5", "A.6.5 Responsibilities after termination or change of employment",
     "Leavers and job changers are made aware of their ongoing information security obligations."),
    ("A.6.6", "A.6.6 Confidentiality or non-disclosure agreements",
     "Agreements are documented and signed when protected information is shared."),
    ("A.6.7", "A.6.7 Remote working",
     "An appropriately secure environment is established for all remote workers."),
    ("A.6.8", "A.6.8 Information security event reporting",
     "People know how to report suspicious events when they come across them."),
]

PHYSICAL_CONTROLS = [
    ("A.7.1", "A.7.1 Physical security perimeters",
     "Perimeters are defined and appropriately secured."),
    ("A.7.2", "A.7.2 Physical entry",
     "Unauthorised access to secure areas is prevented."),
    ("A.7.3", "A.7.3 Securing offices, rooms and facilities",
     "Office locations and layouts are designed with information security in mind."),
    ("A.7.4", "A.7.4 Physical security monitoring",
     "Appropriate physical security monitoring is in place at all locations."),
    ("A.7.5", "A.7.5 Protecting against physical and environmental threats",
     "The risks from physical and environmental threats are managed appropriately."),
    ("A.7.6", "A.7.6 Working in secure areas",
     "Specific rules covering secure areas, such as datacentres, are defined and implemented."),
    ("A.7.7", "A.7.7 Clear desk and clear screen",
     "Devices and sensitive paper documents are protected from prying eyes."),
    ("A.7.8", "A.7.8 Equipment siting and protection",
     "Equipment is sited and positioned so that it is appropriately protected from unauthorised access or damage."),
    ("A.7.9", "A.7.9 Security of assets off-premises",
     "Devices used away from the organization's premises are appropriately protected."),
    ("A.7.10", "A.7.10 Storage media",
     "Storage media are managed throughout their lifecycle and appropriately protected, for example using encryption."),
    ("A.7.11", "A.7.11 Supporting utilities",
     "The risk of failure of utilities has been assessed, and appropriate action taken to protect information processing facilities."),
    ("A.7.12", "A.7.12 Cabling security",
     "The risks to physical cables have been assessed and appropriate protection put in place."),
    ("A.7.13", "A.7.13 Equipment maintenance",
     "Equipment such as UPS, alarm systems, air conditioning and fire systems are maintained correctly."),
    ("A.7.14", "A.7.14 Secure disposal or re-use of equipment",
     "There is a procedure in place to ensure that storage media are wiped and software licenses reclaimed when devices are disposed of."),
]

TECHNOLOGICAL_CONTROLS = [
    ("A.8.1", "A.8.1 User endpoint devices",
     "There is a policy setting out how endpoint devices must be protected and all relevant personnel are aware of its contents."),
    ("A.8.2", "A.8.2 Privileged access rights",
     "Strict controls are in place over who has privileged access rights and they are regularly reviewed."),
    ("A.8.3", "A.8.3 Information access restriction",
     "Dynamic access management techniques are used where appropriate to protect information."),
    ("A.8.4", "A.8.4 Access to source code",
     "Only authorised people have access to source code and associated assets such as software libraries."),
    ("A.8.5", "A.8.5 Secure authentication",
     "Multi-factor authentication (MFA) is used where possible and appropriate to protect information."),
    ("A.8.6", "A.8.6 Capacity management",
     "Resource capacity, including ICT, people and facilities, is monitored and planned for so that it remains adequate at all times."),
    ("A.8.7", "A.8.7 Protection against malware",
     "Anti-malware software is installed on all nodes and complementary controls such as application allowlisting are used to reduce the risk."),
    ("A.8.8", "A.8.8 Management of technical vulnerabilities",
     "Information about vulnerabilities is regularly obtained and appropriate actions taken to address them."),
    ("A.8.9", "A.8.9 Configuration management",
     "Standard configurations are used for hardware, software, services and networks to reduce security exposures."),
    ("A.8.10", "A.8.10 Information deletion",
     "Information that is no longer required is deleted in a timely way and in accordance with legal obligations."),
    ("A.8.11", "A.8.11 Data masking",
     "Techniques such as data masking, pseudonymization and anonymization are used to protect PII where appropriate."),
    ("A.8.12", "A.8.12 Data leakage prevention",
     "Tools and procedures are in place to detect and act upon suspected data extraction by unauthorized people."),
    ("A.8.13", "A.8.13 Information backup",
     "Appropriate backups are taken according to a documented policy and are regularly tested."),
    ("A.8.14", "A.8.14 Redundancy of information processing facilities",
     "Appropriate redundancy is designed into information systems to meet established availability requirements."),
    ("A.8.15", "A.8.15 Logging",
     "Logs are kept and protected that record activities on information systems for analysis and investigation."),
    ("A.8.16", "A.8.16 Monitoring activities",
     "Monitoring tools are used to detect suspicious activity within the organization's systems and networks."),
    ("A.8.17", "A.8.17 Clock synchronization",
     "A central source of time is used for all of the organization's systems and networks."),
    ("A.8.18", "A.8.18 Use of privileged utility programs",
     "Installation and use of utility programs is tightly controlled."),
    ("A.8.19", "A.8.19 Installation of software on operational systems",
     "Procedures are in place to manage the installation, updating and testing of software in the production environment."),
    ("A.8.20", "A.8.20 Networks security",
     "Appropriate controls are in place to secure networks, including virtualized networks."),
    ("A.8.21", "A.8.21 Security of network services",
     "The provision of external network services meets the organization's information security requirements."),
    ("A.8.22", "A.8.22 Segregation of networks",
     "Internal networks are segregated from each other where appropriate."),
    ("A.8.23", "A.8.23 Web filtering",
     "User access to websites is managed according to the organization's defined policy."),
    ("A.8.24", "A.8.24 Use of cryptography",
     "Approved ways to use cryptography are defined and implemented."),
    ("A.8.25", "A.8.25 Secure development life cycle",
     "Software and systems are developed in a secure way according to established rules."),
    ("A.8.26", "A.8.26 Application security requirements",
     "The security of applications is designed and evaluated as part of system development or acquisition."),
    ("A.8.27", "A.8.27 Secure system architecture and engineering principles",
     "A set of principles have been defined for the security of the overall architecture of the organization's systems and services."),
    ("A.8.28", "A.8.28 Secure coding",
     "Bespoke software code is written in a way that maximizes its security and minimizes vulnerabilities."),
    ("A.8.29", "A.8.29 Security testing in development and acceptance",
     "The security of new and changed systems is specifically tested as part of their creation and implementation."),
    ("A.8.30", "A.8.30 Outsourced development",
     "Appropriate control is exercised over the security of software developed by external third parties."),
    ("A.8.31", "A.8.31 Separation of development, test and production environments",
     "The environments involved in the creation and maintenance of software are kept separate with appropriate security implemented on each."),
    ("A.8.32", "A.8.32 Change management",
     "Documented procedures are in place to manage the change process for information systems."),
    ("A.8.33", "A.8.33 Test information",
     "Test data is chosen carefully and with due regard to the protection of sensitive information."),
    ("A.8.34", "A.8.34 Protection of information systems during audit testing",
     "Effective communication occurs between auditors and management to ensure that operational systems are not unduly affected by audit activities."),
]

DOMAINS: Tuple[AssessmentDomain, ...] = (
    AssessmentDomain("context-of-organization", "4. Context of Organization",
                     "contextOrganizationRecords", "context-org",
                     "context-organization-reports", _sections(CONTEXT_OF_ORGANIZATION)),
    AssessmentDomain("leadership", "5. Leadership", "leadershipAssessments",
                     "leadership", "leadership-reports", _sections(LEADERSHIP)),
    AssessmentDomain("planning", "6. Planning", "planningAssessments",
                     "planning", "planning-reports", _sections(PLANNING)),
    AssessmentDomain("support", "7. Support", "supportAssessments",
                     "support", "support-reports", _sections(SUPPORT)),
    AssessmentDomain("operation", "8. Operation", "operationAssessments",
                     "operation", "operation-reports", _sections(OPERATION)),
    AssessmentDomain("performance-evaluation", "9. Performance Evaluation",
                     "performanceEvaluationAssessments", "performance-evaluation",
                     "performance-evaluation-reports", _sections(PERFORMANCE_EVALUATION)),
    AssessmentDomain("improvement", "10. Improvement", "improvementAssessments",
                     "improvement", "improvement-reports", _sections(IMPROVEMENT)),
    AssessmentDomain("organizational-controls", "A.5 Organizational Controls",
                     "organizationalControlsAssessments", "organizational-controls",
                     "organizational-controls-reports", _sections(ORGANIZATIONAL_CONTROLS)),
    AssessmentDomain("people-controls", "A.6 People Controls",
                     "peopleControlsAssessments", "people-controls",
                     "people-controls-reports", _sections(PEOPLE_CONTROLS)),
    AssessmentDomain("physical-controls", "A.7 Physical Controls",
                     "physicalControlsData", "physical-controls",
                     "physical-controls-reports", _sections(PHYSICAL_CONTROLS)),
    AssessmentDomain("technological-controls", "A.8 Technological Controls",
                     "technologicalControlsData", "technological-controls",
                     "technological-controls-reports", _sections(TECHNOLOGICAL_CONTROLS)),
)

_BY_SLUG: Dict[str, AssessmentDomain] = {domain.slug: domain for domain in DOMAINS}


def get_domain(slug: str) -> AssessmentDomain:
    """Look up a domain by slug"""
    try:
        return _BY_SLUG[slug]
    except KeyError:
        raise UnknownDomainError(slug) from None


def domain_for_view(view: str) -> AssessmentDomain:
    """Find the domain whose form or reports view is ``view``"""
    for domain in DOMAINS:
        if view in (domain.form_view, domain.reports_view):
            return domain
    raise UnknownDomainError(view)
