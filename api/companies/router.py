"""
FastAPI router for company endpoints.

Static paths (`/MultipleMapping`, `/multiple`, `/ByEmployeeId/...`) are
declared before `/{company_id}` so the int path param never captures them.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Request, Response, status

from . import repository
from .schemas import Company, CompanyForCreationDto, CompanyForUpdateDto

router = APIRouter(prefix="/api/companies")

# ids are int4 columns; out-of-range values fail validation before any SQL.
DbId = Annotated[int, Path(ge=-(2**31), le=2**31 - 1)]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found.")


async def _require_company(company_id: int) -> Company:
    company = await repository.get_company(company_id)
    if company is None:
        raise _not_found()
    return company


@router.get("", response_model=list[Company])
async def list_companies() -> list[Company]:
    return await repository.list_companies()


@router.get("/MultipleMapping", response_model=list[Company])
async def get_companies_employees_multiple_mapping() -> list[Company]:
    """
    Every company that has employees, each with its full employee list.
    """
    return await repository.get_companies_employees_multiple_mapping()


@router.post("/multiple", status_code=status.HTTP_201_CREATED)
async def create_multiple_companies(companies: list[CompanyForCreationDto]) -> Response:
    await repository.create_multiple_companies(companies)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/ByEmployeeId/{employee_id}", response_model=Company)
async def get_company_by_employee_id(employee_id: DbId) -> Company:
    company = await repository.get_company_by_employee_id(employee_id)
    if company is None:
        raise _not_found()
    return company


@router.get("/{company_id}", response_model=Company, name="company_by_id")
async def get_company(company_id: DbId) -> Company:
    return await _require_company(company_id)


@router.get("/{company_id}/MultipleResult", response_model=Company)
async def get_company_employees_multiple_result(company_id: DbId) -> Company:
    company = await repository.get_company_employees_multiple_results(company_id)
    if company is None:
        raise _not_found()
    return company


@router.post("", response_model=Company, status_code=status.HTTP_201_CREATED)
async def create_company(
    company: CompanyForCreationDto,
    request: Request,
    response: Response,
) -> Company:
    created = await repository.create_company(company)
    response.headers["Location"] = str(request.url_for("company_by_id", company_id=created.id))
    return created


@router.put("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_company(company_id: DbId, company: CompanyForUpdateDto) -> Response:
    await _require_company(company_id)
    await repository.update_company(company_id, company)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(company_id: DbId) -> Response:
    await _require_company(company_id)
    await repository.delete_company(company_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
