"""Main entry point for CertifyGRC - console dashboard summary"""

import sys

from certify_grc.config import config
from certify_grc.storage import build_storage
from certify_grc.workspace import Workspace
from version import __version__, __application__, __description__


def main():
    """Print the dashboard of the configured submission store"""
    print("=" * 60)
    print(f"{__application__} v{__version__}")
    print(f"{__description__}")
    print("=" * 60)
    print()

    workspace = Workspace(build_storage(config))
    dashboard = workspace.render()
    kpis = dashboard["kpis"]

    print("📊 Dashboard")
    print("-" * 60)
    print(f"  - Submissions: {kpis['total_submissions']}")
    print(f"  - Domains Assessed: {kpis['domains_assessed']}/{kpis['domains_total']}")
    print(f"  - Open Actions: {kpis['open_actions']}")
    print(f"  - Compliance Rate: {kpis['compliance_rate']:.1f}%")

    print("\n✅ Assessment Domains:")
    for manager in workspace.managers.values():
        status = manager.compliance_status()
        count = len(manager.list_submissions())
        print(f"  - {manager.domain.title} ({len(manager.domain.sections)} sections): "
              f"{count} submission(s), latest {status['compliance_rate']:.1f}% compliant")

    print("\n⚠️  Registers:")
    for manager in workspace.registers.values():
        print(f"  - {manager.register.title}: {len(manager.list_entries())} entries")

    if dashboard["recent_activity"]:
        print("\n🕒 Recent Activity:")
        for item in dashboard["recent_activity"]:
            print(f"  - [{item['id']}] {item['domain']} - {item['submittedAt']}")

    print("\n" + "=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
