"""
System information endpoints.

Clients read the authentication requirements once at startup to decide
whether they can call an operation before trying it.
"""

from fastapi import APIRouter

from ..dependencies import SettingsDep

router = APIRouter()


@router.get(
    "/AuthenticationRequirements",
    response_model=dict[str, bool],
    summary="Authentication requirements",
    description="Which operation kinds require a bearer token.",
)
def authentication_requirements(settings: SettingsDep) -> dict[str, bool]:
    return settings.authentication_requirements().as_dict()
