"""Task endpoints (billable work templates under a service)."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

import catalog
from auth import Principal, require_admin, require_any_role
from records import UNKNOWN_NAME, Task
from schemas_catalog import TaskIn, TaskOut, TaskUpdateIn
from storage import Storage, get_store
from utils.audit import log_action

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _task_out(task: Task, service_names: dict) -> TaskOut:
    return TaskOut(**task.model_dump(), service_name=service_names.get(task.service_id, UNKNOWN_NAME))


@router.get("", response_model=List[TaskOut])
async def list_tasks(
    service_id: Optional[str] = Query(None, alias="serviceId"),
    search: Optional[str] = Query(None, max_length=100),
    active_only: bool = Query(False, alias="activeOnly"),
    principal: Principal = Depends(require_any_role),
    store: Storage = Depends(get_store),
):
    """Tasks filtered by service, name and activity."""
    service_names = {s.id: s.name for s in store.services.load()}
    tasks = catalog.filter_tasks(store.tasks.load(), service_id=service_id, query=search, active_only=active_only)
    return [_task_out(t, service_names) for t in tasks]


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskIn,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    services = store.services.load()
    tasks, task = catalog.create_task(store.tasks.load(), services, **data.model_dump())
    store.tasks.save(tasks)
    store.commit()
    log_action(admin.employee_id, "task.create", {"task_id": task.id, "service_id": task.service_id})
    return _task_out(task, {s.id: s.name for s in services})


@router.patch("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: str,
    data: TaskUpdateIn,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    services = store.services.load()
    tasks, task = catalog.update_task(
        store.tasks.load(), services, task_id, **data.model_dump(exclude_unset=True)
    )
    store.tasks.save(tasks)
    store.commit()
    log_action(admin.employee_id, "task.update", {"task_id": task_id})
    return _task_out(task, {s.id: s.name for s in services})


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    admin: Principal = Depends(require_admin),
    store: Storage = Depends(get_store),
):
    store.tasks.save(catalog.delete_task(store.tasks.load(), task_id))
    store.commit()
    log_action(admin.employee_id, "task.delete", {"task_id": task_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
