from __future__ import annotations
from fastapi import APIRouter, Depends, Request

from fonokids.authservice.contracts import TokenClaims
from fonokids.authservice.deps import require_claims

from .contracts import PartialUpdate, ProfileEnvelope, UpdateProfileRequest
from .service import ProfileService

router = APIRouter(tags=["profile"])

def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service

@router.get("/profile", response_model=ProfileEnvelope)
def get_own_profile(claims: TokenClaims = Depends(require_claims), svc: ProfileService = Depends(get_profile_service)):
    return ProfileEnvelope(data=svc.get_own_profile(claims))

@router.put("/profile", response_model=ProfileEnvelope)
def update_profile(
    req: UpdateProfileRequest,
    claims: TokenClaims = Depends(require_claims),
    svc: ProfileService = Depends(get_profile_service),
):
    profile = svc.update_profile(claims, PartialUpdate.from_request(req))
    return ProfileEnvelope(message="Profile updated", data=profile)

@router.get("/profile/{patient_id}", response_model=ProfileEnvelope)
def get_patient_profile(
    patient_id: int,
    claims: TokenClaims = Depends(require_claims),
    svc: ProfileService = Depends(get_profile_service),
):
    return ProfileEnvelope(data=svc.get_profile(patient_id))

@router.get("/patients", response_model=ProfileEnvelope)
def list_patients(claims: TokenClaims = Depends(require_claims), svc: ProfileService = Depends(get_profile_service)):
    return ProfileEnvelope(data=svc.list_patients())
