"""DynamoDB-backed document store with optimistic transactions.

Table schema (single table)::

    PK:       "{collection}"
    SK:       "{doc_id}"
    body:     JSON-encoded document
    version:  N, incremented on every write

A transaction records the version of every document it reads and commits
all buffered writes in one ``TransactWriteItems`` call, each conditioned on
the version it saw (or on absence for documents it never read). If another
writer got there first the whole call is cancelled and
``TransactionConflictError`` is raised; nothing is retried here.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from botocore.exceptions import ClientError

from skinscores.exceptions import PersistenceError, TransactionConflictError
from skinscores.persistence.codec import decode_document, encode_document
from skinscores.persistence.query import Document, Filter, apply_query, merge_fields

log = logging.getLogger(__name__)

# TransactWriteItems accepts at most this many items per call
_MAX_TRANSACTION_ITEMS = 100

_Key = tuple[str, str]


def _key(collection: str, doc_id: str) -> dict[str, dict[str, str]]:
    return {"PK": {"S": collection}, "SK": {"S": doc_id}}


class DynamoDBTransaction:
    """Buffers writes and remembers the version of every document read."""

    def __init__(self, store: DynamoDBDocumentStore) -> None:
        self._store = store
        self.read_versions: dict[_Key, int] = {}
        self.writes: dict[_Key, dict[str, Any]] = {}

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        data, version = self._store._get_with_version(collection, doc_id)
        self.read_versions.setdefault((collection, doc_id), version)
        return data

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        key = (collection, doc_id)
        if merge:
            base = self.writes.get(key)
            if base is None:
                base = self.get(collection, doc_id)
            data = merge_fields(base, data)
        self.writes[key] = dict(data)

    def build_items(self, table_name: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        for (collection, doc_id), data in self.writes.items():
            expected = self.read_versions.get((collection, doc_id), 0)
            put: dict[str, Any] = {
                "TableName": table_name,
                "Item": {
                    **_key(collection, doc_id),
                    "body": {"S": encode_document(data)},
                    "version": {"N": str(expected + 1)},
                },
            }
            if expected:
                put["ConditionExpression"] = "version = :expected"
                put["ExpressionAttributeValues"] = {":expected": {"N": str(expected)}}
            else:
                put["ConditionExpression"] = "attribute_not_exists(PK)"
            items.append({"Put": put})

        for (collection, doc_id), expected in self.read_versions.items():
            if (collection, doc_id) in self.writes:
                continue
            check: dict[str, Any] = {"TableName": table_name, "Key": _key(collection, doc_id)}
            if expected:
                check["ConditionExpression"] = "version = :expected"
                check["ExpressionAttributeValues"] = {":expected": {"N": str(expected)}}
            else:
                check["ConditionExpression"] = "attribute_not_exists(PK)"
            items.append({"ConditionCheck": check})
        return items


class DynamoDBDocumentStore:
    """Resolves documents from a DynamoDB single-table."""

    def __init__(
        self,
        table_name: str,
        aws_region: str = "us-east-1",
        boto3_client: Any | None = None,
    ) -> None:
        self._table_name = table_name

        if boto3_client is not None:
            self._client = boto3_client
        else:
            import boto3

            self._client = boto3.client("dynamodb", region_name=aws_region)

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def _get_with_version(self, collection: str, doc_id: str) -> tuple[Optional[dict[str, Any]], int]:
        try:
            response = self._client.get_item(
                TableName=self._table_name,
                Key=_key(collection, doc_id),
                ConsistentRead=True,
            )
        except ClientError as exc:
            raise PersistenceError(f"Failed to read {collection}/{doc_id}: {exc}") from exc
        item = response.get("Item")
        if not item:
            return None, 0
        return decode_document(item["body"]["S"]), int(item["version"]["N"])

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        data, _ = self._get_with_version(collection, doc_id)
        return data

    def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        with self.transaction() as txn:
            txn.get(collection, doc_id)
            txn.set(collection, doc_id, data, merge=merge)

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            self._client.delete_item(TableName=self._table_name, Key=_key(collection, doc_id))
        except ClientError as exc:
            raise PersistenceError(f"Failed to delete {collection}/{doc_id}: {exc}") from exc

    def query(
        self,
        collection: str,
        *,
        where: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        """Read the whole collection partition, then filter and order in process."""
        documents: list[Document] = []
        kwargs: dict[str, Any] = {
            "TableName": self._table_name,
            "KeyConditionExpression": "PK = :pk",
            "ExpressionAttributeValues": {":pk": {"S": collection}},
            "ConsistentRead": True,
        }
        while True:
            try:
                response = self._client.query(**kwargs)
            except ClientError as exc:
                raise PersistenceError(f"Failed to query {collection}: {exc}") from exc
            for item in response.get("Items", []):
                documents.append(Document(item["SK"]["S"], decode_document(item["body"]["S"])))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key

        return apply_query(
            documents, where=where, order_by=order_by, descending=descending, limit=limit
        )

    @contextmanager
    def transaction(self) -> Iterator[DynamoDBTransaction]:
        txn = DynamoDBTransaction(self)
        yield txn
        if not txn.writes:
            return

        items = txn.build_items(self._table_name)
        if len(items) > _MAX_TRANSACTION_ITEMS:
            raise PersistenceError(
                f"Transaction touches {len(items)} documents; the limit is {_MAX_TRANSACTION_ITEMS}"
            )
        try:
            self._client.transact_write_items(TransactItems=items)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in ("TransactionCanceledException", "ConditionalCheckFailedException"):
                log.info("Transaction cancelled by a concurrent write: %s", exc)
                raise TransactionConflictError(
                    "The document changed during the transaction. Retry the request."
                ) from exc
            raise PersistenceError(f"Transaction commit failed: {exc}") from exc
        log.debug("Committed transaction with %d item(s)", len(items))
