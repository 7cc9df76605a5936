"""
Durable record store for restaurants, keyed by name.

``DynamoRecordStore`` is the production backend. ``InMemoryRecordStore``
keeps records in a process-local dict for local runs and tests.
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from functools import reduce
from typing import Any, Protocol

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from .config import DEFAULT_SERVICE_CONFIG, ServiceConfig
from .errors import BackendError, NotFoundError
from .models import Restaurant

logger = logging.getLogger(__name__)

_CONDITION_FAILED = "ConditionalCheckFailedException"


class RecordStore(Protocol):
    def get(self, name: str) -> Restaurant | None: ...

    def put(self, restaurant: Restaurant) -> None: ...

    def update(self, name: str, fields: dict[str, Any]) -> Restaurant: ...

    def delete(self, name: str) -> bool: ...

    def scan(self, filters: dict[str, str]) -> list[Restaurant]: ...


def _to_dynamo(value: Any) -> Any:
    """DynamoDB rejects Python floats; numbers go in as Decimal."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo(v) for k, v in value.items()}
    return value


def _is_condition_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == _CONDITION_FAILED


class DynamoRecordStore:
    def __init__(self, table: Any):
        self._table = table

    @classmethod
    def from_config(cls, config: ServiceConfig = DEFAULT_SERVICE_CONFIG) -> "DynamoRecordStore":
        resource = boto3.resource(
            "dynamodb",
            region_name=config.aws_region,
            endpoint_url=config.dynamodb_endpoint_url,
        )
        return cls(resource.Table(config.table_name))

    def get(self, name: str) -> Restaurant | None:
        try:
            response = self._table.get_item(Key={"name": name})
        except (ClientError, BotoCoreError) as exc:
            raise BackendError("Error reading restaurant", str(exc)) from exc
        item = response.get("Item")
        return Restaurant.from_item(item) if item else None

    def put(self, restaurant: Restaurant) -> None:
        try:
            self._table.put_item(Item=_to_dynamo(restaurant.to_item()))
        except (ClientError, BotoCoreError) as exc:
            raise BackendError("Error writing restaurant", str(exc)) from exc

    def update(self, name: str, fields: dict[str, Any]) -> Restaurant:
        if not fields:
            raise BackendError("Error updating restaurant", "no fields to update")

        names: dict[str, str] = {}
        values: dict[str, Any] = {}
        assignments: list[str] = []
        for i, (field, value) in enumerate(fields.items()):
            names[f"#f{i}"] = field
            values[f":v{i}"] = _to_dynamo(value)
            assignments.append(f"#f{i} = :v{i}")

        try:
            response = self._table.update_item(
                Key={"name": name},
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression=Attr("name").exists(),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if _is_condition_failure(exc):
                raise NotFoundError(name) from exc
            raise BackendError("Error updating restaurant", str(exc)) from exc
        except BotoCoreError as exc:
            raise BackendError("Error updating restaurant", str(exc)) from exc
        return Restaurant.from_item(response["Attributes"])

    def delete(self, name: str) -> bool:
        """Delete ``name``; return False when no such record existed."""
        try:
            self._table.delete_item(
                Key={"name": name},
                ConditionExpression=Attr("name").exists(),
            )
        except ClientError as exc:
            if _is_condition_failure(exc):
                return False
            raise BackendError("Error deleting restaurant", str(exc)) from exc
        except BotoCoreError as exc:
            raise BackendError("Error deleting restaurant", str(exc)) from exc
        return True

    def scan(self, filters: dict[str, str]) -> list[Restaurant]:
        kwargs: dict[str, Any] = {}
        if filters:
            conditions = [Attr(field).eq(value) for field, value in filters.items()]
            kwargs["FilterExpression"] = reduce(lambda a, b: a & b, conditions)

        items: list[dict[str, Any]] = []
        try:
            while True:
                response = self._table.scan(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as exc:
            raise BackendError("Error getting restaurants", str(exc)) from exc

        logger.debug("Scanned %d restaurants matching %s", len(items), filters)
        return [Restaurant.from_item(item) for item in items]


class InMemoryRecordStore:
    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> Restaurant | None:
        with self._lock:
            item = self._records.get(name)
        return Restaurant.from_item(item) if item else None

    def put(self, restaurant: Restaurant) -> None:
        with self._lock:
            self._records[restaurant.name] = restaurant.to_item()

    def update(self, name: str, fields: dict[str, Any]) -> Restaurant:
        with self._lock:
            item = self._records.get(name)
            if item is None:
                raise NotFoundError(name)
            item = {**item, **fields}
            self._records[name] = item
        return Restaurant.from_item(item)

    def delete(self, name: str) -> bool:
        with self._lock:
            return self._records.pop(name, None) is not None

    def scan(self, filters: dict[str, str]) -> list[Restaurant]:
        with self._lock:
            items = list(self._records.values())
        return [
            Restaurant.from_item(item)
            for item in items
            if all(item.get(field) == value for field, value in filters.items())
        ]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
