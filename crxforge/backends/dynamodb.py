"""boto3-backed ``KeyValueStore`` for the extensions ledger table."""

from __future__ import annotations

import logging
from typing import Any

import boto3

from crxforge.config import PublishConfig

logger = logging.getLogger(__name__)


class DynamoDBStore:
    """``KeyValueStore`` over DynamoDB.

    Items are passed through in attribute-value form (``{"S": ...}``), the
    same shape ``LedgerRecord.to_item`` produces.

    Parameters
    ----------
    config:
        Supplies the region and the optional endpoint (use
        ``http://localhost:8000`` for DynamoDB Local).
    client:
        Pre-built boto3 DynamoDB client (tests pass a stubbed one).
    """

    def __init__(self, config: PublishConfig, client: Any | None = None) -> None:
        if client is None:
            client = boto3.client(
                "dynamodb",
                region_name=config.region,
                endpoint_url=config.dynamodb_endpoint or None,
            )
        self._client = client

    def list_tables(self) -> list[str]:
        names: list[str] = []
        paginator = self._client.get_paginator("list_tables")
        for page in paginator.paginate():
            names.extend(page.get("TableNames", []))
        return names

    def create_table(self, table: str) -> None:
        self._client.create_table(
            TableName=table,
            AttributeDefinitions=[{"AttributeName": "ID", "AttributeType": "S"}],
            KeySchema=[{"AttributeName": "ID", "KeyType": "HASH"}],
            ProvisionedThroughput={"ReadCapacityUnits": 5, "WriteCapacityUnits": 5},
        )
        logger.info("Created table %s", table)

    def query(self, table: str, identity: str) -> list[dict[str, Any]]:
        response = self._client.query(
            TableName=table,
            KeyConditionExpression="ID = :id",
            ExpressionAttributeValues={":id": {"S": identity}},
        )
        return response.get("Items", [])

    def put_item(self, table: str, item: dict[str, Any]) -> None:
        self._client.put_item(
            TableName=table,
            Item=item,
            ReturnConsumedCapacity="TOTAL",
        )
