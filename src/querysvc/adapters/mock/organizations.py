"""Mock organization searcher — A fixed directory of organizations."""

from __future__ import annotations

import logging

from querysvc import errors
from querysvc.adapters.base.adapter import OrganizationSearcher
from querysvc.models.criteria import OrganizationSearchCriteria, OrganizationSuggestionCriteria
from querysvc.models.organization import Organization, OrganizationSuggestion, OrganizationSuggestionsResult

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5


def default_organizations() -> list[Organization]:
    return [
        Organization(
            name="The Linux Foundation",
            domain="linuxfoundation.org",
            industry="Non-Profit",
            sector="Technology",
            employees="100-499",
        ),
        Organization(
            name="Zyx-42 Quantum Widgets LLC",
            domain="zyx42-quantum-widgets.fake",
            industry="Imaginary Technology",
            sector="Quantum Widget Manufacturing",
            employees="847",
        ),
        Organization(
            name="Blorbtech Intergalactic Solutions",
            domain="blorbtech-solutions.notreal",
            industry="Space Commerce",
            sector="Intergalactic Consulting",
            employees="23-456",
        ),
        Organization(
            name="Fizzlebottom & Associates Pty",
            domain="fizzlebottom-associates.example",
            industry="Professional Services",
            sector="Nonsensical Consulting",
            employees="12",
        ),
        Organization(
            name="Whizbang Doodad Corporation",
            domain="whizbang-doodads.fake",
            industry="Manufacturing",
            sector="Fictional Doodad Production",
            employees="999+",
        ),
        Organization(
            name="Sproinkel Digital Dynamics",
            domain="sproinkel-digital.test",
            industry="Technology",
            sector="Made-up Digital Solutions",
            employees="73",
        ),
        Organization(
            name="Quibblesnort Cybersecurity Ltd",
            domain="quibblesnort-cyber.mock",
            industry="Technology",
            sector="Fictional Security Services",
            employees="42",
        ),
    ]


class MockOrganizationSearcher(OrganizationSearcher):
    """In-memory ``OrganizationSearcher``.

    Lookups match name, then domain, case-insensitively and exactly.
    Suggestions match substrings of either and never carry a logo.
    """

    def __init__(self, organizations: list[Organization] | None = None) -> None:
        self._organizations = list(organizations) if organizations is not None else default_organizations()

    @property
    def name(self) -> str:
        return "mock"

    async def query_organizations(self, criteria: OrganizationSearchCriteria) -> Organization:
        logger.debug("executing mock organization search: name=%s domain=%s", criteria.name, criteria.domain)

        if criteria.name is not None:
            wanted = criteria.name.lower()
            for org in self._organizations:
                if org.name.lower() == wanted:
                    return org

        if criteria.domain is not None:
            wanted = criteria.domain.lower()
            for org in self._organizations:
                if org.domain.lower() == wanted:
                    return org

        if criteria.name is not None and criteria.domain is not None:
            raise errors.not_found(
                f"organization not found with name '{criteria.name}' or domain '{criteria.domain}'"
            )
        if criteria.name is not None:
            raise errors.not_found(f"organization not found with name '{criteria.name}'")
        if criteria.domain is not None:
            raise errors.not_found(f"organization not found with domain '{criteria.domain}'")
        raise errors.validation("no search criteria provided")

    async def suggest_organizations(self, criteria: OrganizationSuggestionCriteria) -> OrganizationSuggestionsResult:
        query = criteria.query.lower()
        suggestions = [
            OrganizationSuggestion(name=org.name, domain=org.domain)
            for org in self._organizations
            if query in org.name.lower() or query in org.domain.lower()
        ]
        logger.debug("mock organization suggestions for %r: %d found", criteria.query, len(suggestions))
        return OrganizationSuggestionsResult(suggestions=suggestions[:MAX_SUGGESTIONS])

    async def is_ready(self) -> None:
        return None
