"""
Company persistence.
This module is where all Company/Employee SQL lives.

Schema (external, see `db/schema.sql` for a dev bootstrap):
- companies(id serial, name, address, country)
- employees(id serial, name, age, position, company_id -> companies.id)
- ShowCompanyForProvidedEmployeeId(id) -> SETOF companies
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from core import db

from .schemas import Company, CompanyForCreationDto, CompanyForUpdateDto, Employee

logger = logging.getLogger(__name__)

COMPANY_BY_EMPLOYEE_FUNCTION = "ShowCompanyForProvidedEmployeeId"

_INSERT_COMPANY_SQL = "INSERT INTO companies (name, address, country) VALUES ($1, $2, $3)"


def _company_from_row(row: Mapping[str, Any]) -> Company:
    return Company(
        id=int(row["id"]),
        name=row["name"],
        address=row["address"],
        country=row["country"],
    )


def _employee_from_row(row: Mapping[str, Any], *, prefix: str = "") -> Employee:
    return Employee(
        id=int(row[f"{prefix}id"]),
        company_id=int(row[f"{prefix}company_id"]),
        name=row.get(f"{prefix}name"),
        age=row.get(f"{prefix}age"),
        position=row.get(f"{prefix}position"),
    )


def _creation_args(company: CompanyForCreationDto) -> tuple[str, str, str]:
    return company.name, company.address, company.country


def fold_company_rows(rows: Iterable[Mapping[str, Any]]) -> list[Company]:
    """
    Fold flat company+employee JOIN rows into nested Company objects.

    The first row seen for a company id creates the Company; every row
    (including that first one) appends its employee to it. Output keeps
    first-seen order with one Company per id.
    """
    by_id: dict[int, Company] = {}
    order: list[int] = []

    for row in rows:
        company = _company_from_row(row)
        employee = _employee_from_row(row, prefix="employee_")

        current = by_id.get(company.id)
        if current is None:
            current = company
            by_id[company.id] = current
            order.append(company.id)

        current.employees.append(employee)

    return [by_id[company_id] for company_id in order]


async def list_companies() -> list[Company]:
    rows = await db.fetch_all(
        """
        SELECT id, name, address, country
        FROM companies
        ORDER BY id
        """
    )
    return [_company_from_row(row) for row in rows]


async def get_company(company_id: int) -> Company | None:
    row = await db.fetch_one(
        """
        SELECT *
        FROM companies
        WHERE id = $1
        """,
        company_id,
    )
    return _company_from_row(row) if row is not None else None


async def create_company(company: CompanyForCreationDto) -> Company:
    # RETURNING keeps identity retrieval in the same statement as the insert.
    row = await db.fetch_one(
        f"{_INSERT_COMPANY_SQL} RETURNING id",
        *_creation_args(company),
    )
    if row is None or "id" not in row:
        raise RuntimeError("Failed to create company.")

    created = Company(
        id=int(row["id"]),
        name=company.name,
        address=company.address,
        country=company.country,
    )
    logger.info("company_created company_id=%s", created.id)
    return created


async def update_company(company_id: int, company: CompanyForUpdateDto) -> None:
    """
    Update a company in place. Unknown ids are a silent no-op.
    """
    status = await db.execute(
        """
        UPDATE companies
        SET name = $2,
            address = $3,
            country = $4
        WHERE id = $1
        """,
        company_id,
        company.name,
        company.address,
        company.country,
    )
    logger.info("company_updated company_id=%s status=%s", company_id, status)


async def delete_company(company_id: int) -> None:
    """
    Delete a company. Unknown ids are a silent no-op.
    """
    status = await db.execute(
        """
        DELETE FROM companies
        WHERE id = $1
        """,
        company_id,
    )
    logger.info("company_deleted company_id=%s status=%s", company_id, status)


async def get_company_by_employee_id(employee_id: int) -> Company | None:
    """
    Resolve the owning company through the database-side function.
    """
    row = await db.fetch_one(
        f"SELECT * FROM {COMPANY_BY_EMPLOYEE_FUNCTION}($1) LIMIT 1",
        employee_id,
    )
    return _company_from_row(row) if row is not None else None


async def get_company_employees_multiple_results(company_id: int) -> Company | None:
    """
    Read a company and its employees as two result sets on one connection.

    Both reads share a repeatable-read snapshot so the employee list matches
    the company row. A company without employees comes back with [].
    """
    async with db.create_connection() as conn:
        async with conn.transaction(isolation="repeatable_read", readonly=True):
            company_row = await conn.fetchrow(
                """
                SELECT *
                FROM companies
                WHERE id = $1
                """,
                company_id,
            )
            employee_rows = await conn.fetch(
                """
                SELECT *
                FROM employees
                WHERE company_id = $1
                ORDER BY id
                """,
                company_id,
            )

    if company_row is None:
        return None

    company = _company_from_row(company_row)
    company.employees = [_employee_from_row(row) for row in employee_rows]
    return company


async def get_companies_employees_multiple_mapping() -> list[Company]:
    rows = await db.fetch_all(
        """
        SELECT
          c.id,
          c.name,
          c.address,
          c.country,
          e.id AS employee_id,
          e.name AS employee_name,
          e.age AS employee_age,
          e.position AS employee_position,
          e.company_id AS employee_company_id
        FROM companies c
        JOIN employees e ON c.id = e.company_id
        ORDER BY c.id, e.id
        """
    )
    return fold_company_rows(rows)


async def create_multiple_companies(companies: list[CompanyForCreationDto]) -> None:
    """
    Insert companies in a single transaction.

    Any failing insert rolls back the whole batch and the error propagates.
    """
    if not companies:
        return

    records = [_creation_args(company) for company in companies]

    async with db.create_connection() as conn:
        async with conn.transaction():
            await conn.executemany(_INSERT_COMPANY_SQL, records)

    logger.info("companies_created count=%s", len(records))
