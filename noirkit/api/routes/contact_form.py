from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from noirkit.api.dependencies import get_dashboard_store
from noirkit.api.helpers import order_by_ids, store_errors
from noirkit.api.schemas.common import ApiResponse, DeleteResultDTO, ReorderRequestDTO
from noirkit.api.schemas.portfolio import (
    ContactFieldCreateDTO,
    ContactFieldDTO,
    ContactFieldUpdateDTO,
    ContactFormDTO,
    ContactFormUpdateDTO,
)
from noirkit.services.portfolio_store import PortfolioStore

router = APIRouter(prefix="/dashboard/contact-form", tags=["contact-form"])


@router.put("", response_model=ApiResponse[ContactFormDTO])
def put_contact_form(
    request: ContactFormUpdateDTO,
    store: PortfolioStore = Depends(get_dashboard_store),
):
    with store_errors():
        form = store.update_contact_form(request.model_dump(exclude_unset=True))
    return ApiResponse(success=True, data=ContactFormDTO(**asdict(form)), error=None)


@router.post("/fields", response_model=ApiResponse[ContactFieldDTO])
def post_contact_field(
    request: ContactFieldCreateDTO,
    store: PortfolioStore = Depends(get_dashboard_store),
):
    form = store.contact_form
    if form is not None and any(f.name == request.name for f in form.fields):
        raise HTTPException(status_code=409, detail=f"A field named '{request.name}' already exists")

    with store_errors():
        field = store.add_contact_field(request.model_dump())
    return ApiResponse(success=True, data=ContactFieldDTO(**asdict(field)), error=None)


@router.put("/fields/order", response_model=ApiResponse[List[ContactFieldDTO]])
def put_contact_field_order(
    request: ReorderRequestDTO,
    store: PortfolioStore = Depends(get_dashboard_store),
):
    current = store.contact_form.fields if store.contact_form else []
    ordered = order_by_ids(current, request.ids)
    with store_errors():
        fields = store.reorder_contact_fields(ordered)
    return ApiResponse(success=True, data=[ContactFieldDTO(**asdict(f)) for f in fields], error=None)


@router.patch("/fields/{field_id}", response_model=ApiResponse[ContactFieldDTO])
def patch_contact_field(
    field_id: str,
    request: ContactFieldUpdateDTO,
    store: PortfolioStore = Depends(get_dashboard_store),
):
    with store_errors():
        field = store.update_contact_field(field_id, request.model_dump(exclude_unset=True))
    if field is None:
        raise HTTPException(status_code=404, detail="Contact field not found")
    return ApiResponse(success=True, data=ContactFieldDTO(**asdict(field)), error=None)


@router.delete("/fields/{field_id}", response_model=ApiResponse[DeleteResultDTO])
def delete_contact_field(
    field_id: str,
    store: PortfolioStore = Depends(get_dashboard_store),
):
    with store_errors():
        deleted = store.delete_contact_field(field_id)
    return ApiResponse(success=True, data=DeleteResultDTO(deleted=deleted), error=None)
