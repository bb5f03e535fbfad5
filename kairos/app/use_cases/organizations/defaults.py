"""
Default module sets seeded when an organization is created.
"""

from typing import Dict, List

from kairos.domain.entities import ModuleName, OrganizationType

BASE_MODULES: List[ModuleName] = [
    ModuleName.today,
    ModuleName.tasks,
    ModuleName.calendar,
]

DEFAULT_MODULES_BY_TYPE: Dict[OrganizationType, List[ModuleName]] = {
    OrganizationType.individual: BASE_MODULES
    + [
        ModuleName.money,
        ModuleName.health,
        ModuleName.fitness,
        ModuleName.connections,
        ModuleName.love,
        ModuleName.creators,
        ModuleName.crypto,
        ModuleName.stocks,
        ModuleName.news,
    ],
    OrganizationType.family: BASE_MODULES
    + [
        ModuleName.money,
        ModuleName.health,
        ModuleName.fitness,
        ModuleName.connections,
        ModuleName.news,
    ],
    OrganizationType.team: BASE_MODULES
    + [ModuleName.professional, ModuleName.creators, ModuleName.business],
    OrganizationType.project: BASE_MODULES
    + [ModuleName.professional, ModuleName.creators, ModuleName.business],
    OrganizationType.organization: BASE_MODULES
    + [
        ModuleName.professional,
        ModuleName.business,
        ModuleName.money,
        ModuleName.creators,
        ModuleName.crypto,
        ModuleName.stocks,
    ],
}


def default_modules_for(organization_type: OrganizationType) -> List[ModuleName]:
    return list(DEFAULT_MODULES_BY_TYPE.get(organization_type, BASE_MODULES))
