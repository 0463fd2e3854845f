"""Client monthly rollup schemas (admin client reports)."""
from records import Client
from schemas import ApiModel
from schemas_reports import EntryOut


class TopServiceOut(ApiModel):
    service_name: str
    hours: float


class ClientMonthRowOut(ApiModel):
    client: Client
    total_hours: float
    employee_count: int
    top_services: list[TopServiceOut]


class EmployeeHoursOut(ApiModel):
    employee_id: str
    employee_name: str
    hours: float


class ServiceHoursOut(ApiModel):
    service_id: str
    service_name: str
    hours: float


class TaskHoursOut(ApiModel):
    task_id: str
    task_name: str
    hours: float


class ClientMonthDetailOut(ApiModel):
    client: Client
    month_key: str
    month_label: str
    total_hours: float
    employee_count: int
    service_count: int
    task_count: int
    by_employee: list[EmployeeHoursOut]
    by_service: list[ServiceHoursOut]
    by_task: list[TaskHoursOut]
    entries: list[EntryOut]
