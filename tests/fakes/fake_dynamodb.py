"""In-process stand-in for the boto3 DynamoDB client calls the store makes."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import ClientError


def _cancelled(reason: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": "TransactionCanceledException", "Message": reason}},
        "TransactWriteItems",
    )


class FakeDynamoDBClient:
    """Single table keyed by ``(PK, SK)``; honours the condition expressions the store emits."""

    def __init__(self, page_size: int = 2) -> None:
        self.items: dict[tuple[str, str], dict[str, Any]] = {}
        self.page_size = page_size
        self.transact_calls: list[list[dict[str, Any]]] = []
        self.query_calls = 0
        self.fail_next_commit_with: str | None = None

    @staticmethod
    def _key(key: dict[str, Any]) -> tuple[str, str]:
        return key["PK"]["S"], key["SK"]["S"]

    def get_item(self, **kwargs: Any) -> dict[str, Any]:
        item = self.items.get(self._key(kwargs["Key"]))
        return {"Item": dict(item)} if item else {}

    def delete_item(self, **kwargs: Any) -> dict[str, Any]:
        self.items.pop(self._key(kwargs["Key"]), None)
        return {}

    def query(self, **kwargs: Any) -> dict[str, Any]:
        self.query_calls += 1
        pk = kwargs["ExpressionAttributeValues"][":pk"]["S"]
        keys = sorted(key for key in self.items if key[0] == pk)
        start = 0
        if "ExclusiveStartKey" in kwargs:
            start = keys.index(self._key(kwargs["ExclusiveStartKey"])) + 1
        page = keys[start : start + self.page_size]
        response: dict[str, Any] = {"Items": [dict(self.items[key]) for key in page]}
        if start + self.page_size < len(keys):
            last = page[-1]
            response["LastEvaluatedKey"] = {"PK": {"S": last[0]}, "SK": {"S": last[1]}}
        return response

    def transact_write_items(self, **kwargs: Any) -> dict[str, Any]:
        items = kwargs["TransactItems"]
        self.transact_calls.append(items)
        if self.fail_next_commit_with:
            code, self.fail_next_commit_with = self.fail_next_commit_with, None
            raise ClientError({"Error": {"Code": code, "Message": "injected"}}, "TransactWriteItems")

        for entry in items:
            op = entry.get("Put") or entry["ConditionCheck"]
            key = self._key(op["Item"] if "Put" in entry else op["Key"])
            if not self._condition_holds(op, key):
                raise _cancelled(f"ConditionalCheckFailed on {key}")

        for entry in items:
            if "Put" in entry:
                item = entry["Put"]["Item"]
                self.items[self._key(item)] = dict(item)
        return {}

    def _condition_holds(self, op: dict[str, Any], key: tuple[str, str]) -> bool:
        existing = self.items.get(key)
        condition = op.get("ConditionExpression", "")
        if condition == "attribute_not_exists(PK)":
            return existing is None
        if condition == "version = :expected":
            expected = op["ExpressionAttributeValues"][":expected"]["N"]
            return existing is not None and existing["version"]["N"] == expected
        return True

    def bump_version(self, pk: str, sk: str) -> None:
        """Simulate a concurrent writer touching ``(pk, sk)``."""
        item = self.items[(pk, sk)]
        item["version"] = {"N": str(int(item["version"]["N"]) + 1)}
