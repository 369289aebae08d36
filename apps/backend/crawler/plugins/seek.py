"""
SEEK job board plugin.
"""
from .base import DomainSelectorPlugin


class SeekPlugin(DomainSelectorPlugin):
    """Reads SEEK job detail pages via their data-automation attributes"""

    HOST_MARKER = 'seek'
    DEFAULT_COMPANY = 'Seek Employer'
    TITLE_SELECTORS = ['[data-automation="job-detail-title"]']
    COMPANY_SELECTORS = ['[data-automation="advertiser-name"]']
    LOCATION_SELECTORS = ['[data-automation="job-detail-location"]']
    JOB_TYPE_SELECTORS = ['[data-automation="job-detail-work-type"]']
    DESCRIPTION_SELECTORS = ['[data-automation="jobAdDetails"]']

    def __init__(self):
        super().__init__(name="seek", priority=50)
