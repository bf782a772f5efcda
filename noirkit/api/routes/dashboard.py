from dataclasses import asdict
from typing import Callable, List, Type

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from noirkit.api.dependencies import get_dashboard_store
from noirkit.api.helpers import order_by_ids, store_errors
from noirkit.api.schemas.common import ApiResponse, DeleteResultDTO, ReorderRequestDTO
from noirkit.api.schemas.portfolio import (
    AchievementCreateDTO,
    AchievementDTO,
    AchievementUpdateDTO,
    PersonalInfoDTO,
    PersonalInfoUpdateDTO,
    PortfolioDTO,
    ProjectCreateDTO,
    ProjectDTO,
    ProjectUpdateDTO,
    SocialLinkCreateDTO,
    SocialLinkDTO,
    SocialLinkUpdateDTO,
    TechStackCreateDTO,
    TechStackDTO,
    TechStackUpdateDTO,
)
from noirkit.services.portfolio_store import PortfolioStore

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/portfolio", response_model=ApiResponse[PortfolioDTO])
def get_dashboard_portfolio(store: PortfolioStore = Depends(get_dashboard_store)):
    return ApiResponse(success=True, data=PortfolioDTO(**store.snapshot()), error=None)


@router.put("/personal-info", response_model=ApiResponse[PersonalInfoDTO])
def put_personal_info(
    request: PersonalInfoUpdateDTO,
    store: PortfolioStore = Depends(get_dashboard_store),
):
    with store_errors():
        info = store.update_personal_info(request.model_dump(exclude_unset=True))
    return ApiResponse(success=True, data=PersonalInfoDTO(**asdict(info)), error=None)


def _register_collection(
    path: str,
    label: str,
    create_dto: Type[BaseModel],
    update_dto: Type[BaseModel],
    out_dto: Type[BaseModel],
    items: Callable[[PortfolioStore], list],
    add: Callable,
    update: Callable,
    delete: Callable,
    reorder: Callable,
) -> None:
    """CRUD + reorder routes for one ordered collection of the portfolio."""

    @router.post(f"/{path}", response_model=ApiResponse[out_dto], name=f"add_{label}")
    def post_item(request: create_dto, store: PortfolioStore = Depends(get_dashboard_store)):
        with store_errors():
            item = add(store, request.model_dump())
        return ApiResponse(success=True, data=out_dto(**asdict(item)), error=None)

    @router.patch(f"/{path}/{{item_id}}", response_model=ApiResponse[out_dto], name=f"update_{label}")
    def patch_item(item_id: str, request: update_dto, store: PortfolioStore = Depends(get_dashboard_store)):
        with store_errors():
            item = update(store, item_id, request.model_dump(exclude_unset=True))
        if item is None:
            raise HTTPException(status_code=404, detail=f"{label.replace('_', ' ').capitalize()} not found")
        return ApiResponse(success=True, data=out_dto(**asdict(item)), error=None)

    @router.delete(f"/{path}/{{item_id}}", response_model=ApiResponse[DeleteResultDTO], name=f"delete_{label}")
    def delete_item(item_id: str, store: PortfolioStore = Depends(get_dashboard_store)):
        with store_errors():
            deleted = delete(store, item_id)
        return ApiResponse(success=True, data=DeleteResultDTO(deleted=deleted), error=None)

    @router.put(f"/{path}/order", response_model=ApiResponse[List[out_dto]], name=f"reorder_{label}")
    def put_order(request: ReorderRequestDTO, store: PortfolioStore = Depends(get_dashboard_store)):
        ordered = order_by_ids(items(store), request.ids)
        with store_errors():
            result = reorder(store, ordered)
        return ApiResponse(success=True, data=[out_dto(**asdict(i)) for i in result], error=None)


_register_collection(
    "social-links", "social_link",
    SocialLinkCreateDTO, SocialLinkUpdateDTO, SocialLinkDTO,
    lambda s: s.social_links,
    PortfolioStore.add_social_link,
    PortfolioStore.update_social_link,
    PortfolioStore.delete_social_link,
    PortfolioStore.reorder_social_links,
)
_register_collection(
    "projects", "project",
    ProjectCreateDTO, ProjectUpdateDTO, ProjectDTO,
    lambda s: s.projects,
    PortfolioStore.add_project,
    PortfolioStore.update_project,
    PortfolioStore.delete_project,
    PortfolioStore.reorder_projects,
)
_register_collection(
    "tech-stack", "tech_stack",
    TechStackCreateDTO, TechStackUpdateDTO, TechStackDTO,
    lambda s: s.tech_stack,
    PortfolioStore.add_tech_stack,
    PortfolioStore.update_tech_stack,
    PortfolioStore.delete_tech_stack,
    PortfolioStore.reorder_tech_stack,
)
_register_collection(
    "achievements", "achievement",
    AchievementCreateDTO, AchievementUpdateDTO, AchievementDTO,
    lambda s: s.achievements,
    PortfolioStore.add_achievement,
    PortfolioStore.update_achievement,
    PortfolioStore.delete_achievement,
    PortfolioStore.reorder_achievements,
)
