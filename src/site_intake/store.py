"""Project stores: where submitted intake payloads are persisted."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import httpx
import yaml
from loguru import logger

from .config import StoreBackend, StoreConfig
from .models import Project, ProjectAddon, ProjectMessage, ProjectPayment, SenderType

PROJECTS_TABLE = "projects"
MESSAGES_TABLE = "project_messages"
PAYMENTS_TABLE = "project_payments"
ADDONS_TABLE = "project_addons"
RELATED_TABLES = (MESSAGES_TABLE, PAYMENTS_TABLE, ADDONS_TABLE)


class StoreError(Exception):
    """Raised when a store cannot complete an operation."""

    def __init__(self, message: str, *, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient


class ProjectNotFound(StoreError):
    """Raised when a project id does not exist."""


class ProjectStore(Protocol):
    async def create_project(self, payload: Dict[str, Any]) -> Project:
        ...

    async def list_projects(self, client_id: str) -> List[Project]:
        ...

    async def get_project(self, project_id: str) -> Project:
        ...

    async def list_messages(self, project_id: str) -> List[ProjectMessage]:
        ...

    async def send_message(
        self,
        project_id: str,
        text: str,
        *,
        sender: str,
        sender_type: SenderType = SenderType.CLIENT,
    ) -> Optional[ProjectMessage]:
        ...

    async def list_payments(self, project_id: str) -> List[ProjectPayment]:
        ...

    async def list_addons(self, project_id: str) -> List[ProjectAddon]:
        ...


def _now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _stamp(payload: Dict[str, Any], *, updated: bool = True) -> Dict[str, Any]:
    now = _now()
    record = dict(payload)
    record["id"] = str(uuid.uuid4())
    record["created_at"] = now
    if updated:
        record["updated_at"] = now
    return record


def _newest_first(projects: List[Project]) -> List[Project]:
    return sorted(projects, key=lambda project: project.created_at or "", reverse=True)


def _project_rows(rows: List[Dict[str, Any]], project_id: str, *, newest_first: bool = False) -> List[Dict[str, Any]]:
    """Rows belonging to ``project_id`` ordered by ``created_at``."""

    matches = [row for row in rows if str(row.get("project_id")) == project_id]
    return sorted(matches, key=lambda row: row.get("created_at") or "", reverse=newest_first)


def _message_record(project_id: str, text: str, sender: str, sender_type: SenderType) -> Optional[Dict[str, Any]]:
    """Build the insert payload for a message, or None when ``text`` is blank."""

    body = text.strip()
    if not body:
        logger.debug("Ignoring blank message for project {}", project_id)
        return None
    return {
        "project_id": project_id,
        "sender": sender,
        "message": body,
        "sender_type": SenderType(sender_type).value,
    }


class InMemoryProjectStore:
    """Keep projects in a dict for the lifetime of the process.

    ``tables`` seeds the related tables (messages, payments, add-ons) with
    plain records, the way a backend would already hold them.
    """

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}
        self._tables: Dict[str, List[Dict[str, Any]]] = {name: [] for name in RELATED_TABLES}
        for name, rows in (tables or {}).items():
            if name not in self._tables:
                raise StoreError(f"Unknown table '{name}'")
            self._tables[name] = [dict(row) for row in rows]

    async def create_project(self, payload: Dict[str, Any]) -> Project:
        record = _stamp(payload)
        self._records[record["id"]] = record
        logger.debug("Stored project {} in memory", record["id"])
        return Project.from_record(record)

    async def list_projects(self, client_id: str) -> List[Project]:
        projects = [Project.from_record(r) for r in self._records.values() if r.get("client_id") == client_id]
        return _newest_first(projects)

    async def get_project(self, project_id: str) -> Project:
        record = self._records.get(project_id)
        if record is None:
            raise ProjectNotFound(f"Project {project_id} not found")
        return Project.from_record(record)

    async def list_messages(self, project_id: str) -> List[ProjectMessage]:
        return [ProjectMessage.from_record(r) for r in _project_rows(self._tables[MESSAGES_TABLE], project_id)]

    async def send_message(
        self,
        project_id: str,
        text: str,
        *,
        sender: str,
        sender_type: SenderType = SenderType.CLIENT,
    ) -> Optional[ProjectMessage]:
        payload = _message_record(project_id, text, sender, sender_type)
        if payload is None:
            return None
        record = _stamp(payload, updated=False)
        self._tables[MESSAGES_TABLE].append(record)
        return ProjectMessage.from_record(record)

    async def list_payments(self, project_id: str) -> List[ProjectPayment]:
        return [ProjectPayment.from_record(r) for r in _project_rows(self._tables[PAYMENTS_TABLE], project_id)]

    async def list_addons(self, project_id: str) -> List[ProjectAddon]:
        rows = _project_rows(self._tables[ADDONS_TABLE], project_id, newest_first=True)
        return [ProjectAddon.from_record(r) for r in rows]


class YamlProjectStore:
    """Persist projects and their related tables in one YAML file.

    The file holds a mapping of table name to list of records. A bare list is
    still read as the ``projects`` table.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        if not self.path.exists():
            return {}
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise StoreError(f"Failed to read {self.path}: {exc}") from exc
        if data is None:
            return {}
        if isinstance(data, list):
            return {PROJECTS_TABLE: data}
        if not isinstance(data, dict):
            raise StoreError(f"{self.path} does not contain project tables")
        for name, rows in data.items():
            if name != PROJECTS_TABLE and name not in RELATED_TABLES:
                raise StoreError(f"{self.path} has an unknown table '{name}'")
            if rows is not None and not isinstance(rows, list):
                raise StoreError(f"{self.path}: table '{name}' is not a list of records")
        return data

    def _rows(self, table: str) -> List[Dict[str, Any]]:
        return list(self._load().get(table) or [])

    def _append(self, table: str, record: Dict[str, Any]) -> None:
        tables = self._load()
        tables[table] = list(tables.get(table) or []) + [record]
        self._write(tables)

    def _write(self, tables: Dict[str, List[Dict[str, Any]]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                yaml.safe_dump(tables, sort_keys=False, allow_unicode=True),
                encoding="utf-8",
            )
        except OSError as exc:
            raise StoreError(f"Failed to write {self.path}: {exc}", transient=True) from exc

    async def create_project(self, payload: Dict[str, Any]) -> Project:
        record = _stamp(payload)
        self._append(PROJECTS_TABLE, record)
        logger.info("Stored project {} in {}", record["id"], self.path)
        return Project.from_record(record)

    async def list_projects(self, client_id: str) -> List[Project]:
        projects = [Project.from_record(r) for r in self._rows(PROJECTS_TABLE) if r.get("client_id") == client_id]
        return _newest_first(projects)

    async def get_project(self, project_id: str) -> Project:
        for record in self._rows(PROJECTS_TABLE):
            if str(record.get("id")) == project_id:
                return Project.from_record(record)
        raise ProjectNotFound(f"Project {project_id} not found")

    async def list_messages(self, project_id: str) -> List[ProjectMessage]:
        return [ProjectMessage.from_record(r) for r in _project_rows(self._rows(MESSAGES_TABLE), project_id)]

    async def send_message(
        self,
        project_id: str,
        text: str,
        *,
        sender: str,
        sender_type: SenderType = SenderType.CLIENT,
    ) -> Optional[ProjectMessage]:
        payload = _message_record(project_id, text, sender, sender_type)
        if payload is None:
            return None
        record = _stamp(payload, updated=False)
        self._append(MESSAGES_TABLE, record)
        logger.info("Stored message {} for project {}", record["id"], project_id)
        return ProjectMessage.from_record(record)

    async def list_payments(self, project_id: str) -> List[ProjectPayment]:
        return [ProjectPayment.from_record(r) for r in _project_rows(self._rows(PAYMENTS_TABLE), project_id)]

    async def list_addons(self, project_id: str) -> List[ProjectAddon]:
        rows = _project_rows(self._rows(ADDONS_TABLE), project_id, newest_first=True)
        return [ProjectAddon.from_record(r) for r in rows]


class RestProjectStore:
    """Talk to a PostgREST-style endpoint (``/rest/v1/<table>``)."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        table: str = PROJECTS_TABLE,
        timeout: float = 10.0,
    ) -> None:
        self._base = f"{base_url.rstrip('/')}/rest/v1"
        self.endpoint = f"{self._base}/{table}"
        self._timeout = timeout
        self._headers: Dict[str, str] = {"Accept": "application/json"}
        if api_key:
            self._headers["apikey"] = api_key
            self._headers["Authorization"] = f"Bearer {api_key}"

    async def _request(
        self,
        method: str,
        *,
        table: Optional[str] = None,
        prefer: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        url = f"{self._base}/{table}" if table else self.endpoint
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise StoreError("Connection timeout", transient=True) from exc
        except httpx.TransportError as exc:
            raise StoreError(f"Connection failed: {exc}", transient=True) from exc

        if resp.status_code >= 500:
            raise StoreError(f"HTTP {resp.status_code}", transient=True)
        if resp.status_code >= 400:
            raise StoreError(_error_message(resp))
        return resp.json()

    async def _insert(self, payload: Dict[str, Any], *, table: Optional[str] = None) -> Dict[str, Any]:
        rows = await self._request("POST", table=table, prefer="return=representation", json=payload)
        if isinstance(rows, list):
            if not rows:
                raise StoreError("Insert returned no rows")
            rows = rows[0]
        return rows

    async def _select(self, table: str, project_id: str, order: str) -> List[Dict[str, Any]]:
        return await self._request(
            "GET",
            table=table,
            params={"select": "*", "project_id": f"eq.{project_id}", "order": order},
        )

    async def create_project(self, payload: Dict[str, Any]) -> Project:
        row = await self._insert(payload)
        logger.info("Stored project {} at {}", row.get("id"), self.endpoint)
        return Project.from_record(row)

    async def list_projects(self, client_id: str) -> List[Project]:
        rows = await self._request(
            "GET",
            params={"select": "*", "client_id": f"eq.{client_id}", "order": "created_at.desc"},
        )
        return [Project.from_record(row) for row in rows]

    async def get_project(self, project_id: str) -> Project:
        rows = await self._request("GET", params={"select": "*", "id": f"eq.{project_id}"})
        if not rows:
            raise ProjectNotFound(f"Project {project_id} not found")
        return Project.from_record(rows[0])

    async def list_messages(self, project_id: str) -> List[ProjectMessage]:
        rows = await self._select(MESSAGES_TABLE, project_id, "created_at.asc")
        return [ProjectMessage.from_record(row) for row in rows]

    async def send_message(
        self,
        project_id: str,
        text: str,
        *,
        sender: str,
        sender_type: SenderType = SenderType.CLIENT,
    ) -> Optional[ProjectMessage]:
        payload = _message_record(project_id, text, sender, sender_type)
        if payload is None:
            return None
        row = await self._insert(payload, table=MESSAGES_TABLE)
        logger.info("Stored message {} for project {}", row.get("id"), project_id)
        return ProjectMessage.from_record(row)

    async def list_payments(self, project_id: str) -> List[ProjectPayment]:
        rows = await self._select(PAYMENTS_TABLE, project_id, "created_at.asc")
        return [ProjectPayment.from_record(row) for row in rows]

    async def list_addons(self, project_id: str) -> List[ProjectAddon]:
        rows = await self._select(ADDONS_TABLE, project_id, "created_at.desc")
        return [ProjectAddon.from_record(row) for row in rows]


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {resp.status_code}"


def build_store(config: StoreConfig) -> ProjectStore:
    """Instantiate the backend selected in configuration."""

    if config.backend == StoreBackend.MEMORY:
        return InMemoryProjectStore()
    if config.backend == StoreBackend.YAML:
        return YamlProjectStore(config.path)
    return RestProjectStore(
        config.url or "",
        api_key=config.resolved_api_key(),
        table=config.table,
        timeout=config.timeout,
    )


__all__ = [
    "PROJECTS_TABLE",
    "MESSAGES_TABLE",
    "PAYMENTS_TABLE",
    "ADDONS_TABLE",
    "StoreError",
    "ProjectNotFound",
    "ProjectStore",
    "InMemoryProjectStore",
    "YamlProjectStore",
    "RestProjectStore",
    "build_store",
]
