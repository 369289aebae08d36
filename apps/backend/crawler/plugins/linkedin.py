"""
LinkedIn jobs plugin.

Covers both the logged-in job view and the public guest page.
"""
from .base import DomainSelectorPlugin


class LinkedInPlugin(DomainSelectorPlugin):
    """LinkedIn job view selectors (unified top card + guest layout)"""

    HOST_MARKER = 'linkedin'
    DEFAULT_COMPANY = 'LinkedIn Employer'
    TITLE_SELECTORS = [
        '.job-details-jobs-unified-top-card__job-title',
        '.jobs-unified-top-card__job-title',
        '.top-card-layout__title',
    ]
    COMPANY_SELECTORS = [
        '.job-details-jobs-unified-top-card__company-name',
        '.jobs-unified-top-card__company-name',
        '.topcard__org-name-link',
    ]
    LOCATION_SELECTORS = [
        '.job-details-jobs-unified-top-card__bullet',
        '.topcard__flavor--bullet',
    ]
    DESCRIPTION_SELECTORS = [
        '.jobs-description__content',
        '.description__text',
    ]

    def __init__(self):
        super().__init__(name="linkedin", priority=50)
