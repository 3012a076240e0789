"""Assignment listing endpoints."""

import logging

from fastapi import APIRouter, Depends, Request, Response

from ..db.assignments import AssignmentRepository
from ..models.assignments import AssignmentFilters, AssignmentId, AssignmentLinkPage, AssignmentPage
from ..pagination import Cursor, Paginator, ParamsParser, entity_payload, optional, required


logger = logging.getLogger(__name__)

assignments_router = APIRouter(
    prefix="/assignments",
    tags=["Assignments"],
    responses={
        400: {"description": "Bad Request - Invalid pagination or filter parameters"}
    }
)

assignment_params = ParamsParser(
    required("teacherId", int),
    optional("courseId", int),
    build=AssignmentFilters
)


def get_repository(request: Request) -> AssignmentRepository:
    """Data source configured on the application."""
    return request.app.state.assignments


def get_paginator(request: Request) -> Paginator:
    """Paginator for assignment listings, ordered by assignment id."""
    return Paginator(
        assignment_params,
        params_type=AssignmentFilters,
        position_type=AssignmentId,
        max_cursor_size=request.app.state.settings.max_cursor_size,
        lookahead=request.app.state.settings.pagination_lookahead
    )


def fetch_with(repository: AssignmentRepository):
    def fetch(cursor: Cursor):
        return repository.list_assignments(cursor.params, cursor.last_position, cursor.limit)
    return fetch


@assignments_router.get(
    "",
    response_model=AssignmentPage,
    summary="List assignments",
    description=(
        "List a teacher's assignments in id order. Filter with `teacherId` (required) and "
        "`courseId`, bound the page with `limit`, and pass the returned `next` token as the "
        "`next` query parameter to fetch the following page."
    )
)
async def list_assignments(
    request: Request,
    repository: AssignmentRepository = Depends(get_repository),
    paginator: Paginator = Depends(get_paginator)
) -> AssignmentPage:
    """List assignments with opaque cursor tokens."""
    page = await paginator.token_page(request, fetch_with(repository), entity_payload("id"))
    logger.info(f"Listed {len(page.data)} assignments (has_next={page.next is not None})")
    return AssignmentPage.model_validate(page.model_dump())


@assignments_router.get(
    "/links",
    response_model=AssignmentLinkPage,
    summary="List assignments with navigation links",
    description=(
        "Same listing as `/assignments`, navigated through URLs. The `first` and `next` "
        "fields (and the `Link` header) are the current request URL with the `position` "
        "query parameter rewritten."
    )
)
async def list_assignments_with_links(
    request: Request,
    response: Response,
    repository: AssignmentRepository = Depends(get_repository),
    paginator: Paginator = Depends(get_paginator)
) -> AssignmentLinkPage:
    """List assignments with first/next navigation links."""
    page = await paginator.link_page(request, fetch_with(repository), entity_payload("id"))

    link_header = paginator.link_header(page)
    if link_header:
        response.headers["Link"] = link_header

    logger.info(f"Listed {len(page.data)} assignments (has_next={page.next is not None})")
    return AssignmentLinkPage.model_validate(page.model_dump())


__all__ = ["assignments_router"]
