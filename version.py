"""Version information for CertifyGRC"""

__version__ = "1.0.0"
__application__ = "CertifyGRC"
__description__ = "ISO/IEC 27001 Gap Assessment Dashboard"
