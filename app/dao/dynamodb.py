"""
DynamoDB implementation of InboundRuleRepository.

Table schema
────────────
  Table name    : space_inbound_rules  (configurable via DYNAMODB_TABLE_NAME)
  Partition key : space    (String)
  Sort key      : rule_id  (String, "<source> <action>")

The table is created on first use when it does not already exist.
"""

import logging
from typing import Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from app.config import settings
from app.dao.base import InboundRuleRepository

logger = logging.getLogger(__name__)


class DynamoDBInboundRuleRepository(InboundRuleRepository):
    """
    InboundRuleRepository backed by Amazon DynamoDB.

    The boto3 resource and table handle are created lazily so that importing
    this module does not require live AWS credentials.
    """

    def __init__(self) -> None:
        self._table = None

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _build_resource(self):
        kwargs: dict = {"region_name": settings.aws_region}
        if settings.aws_access_key_id:
            kwargs["aws_access_key_id"] = settings.aws_access_key_id
            kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
        if settings.dynamodb_endpoint_url:
            kwargs["endpoint_url"] = settings.dynamodb_endpoint_url
        return boto3.resource("dynamodb", **kwargs)

    def _get_table(self):
        if self._table is not None:
            return self._table

        ddb = self._build_resource()
        table_name = settings.dynamodb_table_name

        try:
            table = ddb.create_table(
                TableName=table_name,
                KeySchema=[
                    {"AttributeName": "space", "KeyType": "HASH"},
                    {"AttributeName": "rule_id", "KeyType": "RANGE"},
                ],
                AttributeDefinitions=[
                    {"AttributeName": "space", "AttributeType": "S"},
                    {"AttributeName": "rule_id", "AttributeType": "S"},
                ],
                BillingMode="PAY_PER_REQUEST",
            )
            table.wait_until_exists()
            logger.info("DynamoDB table '%s' created.", table_name)
        except ClientError as exc:
            if exc.response["Error"]["Code"] == "ResourceInUseException":
                table = ddb.Table(table_name)
            else:
                raise

        self._table = table
        return self._table

    # ── InboundRuleRepository interface ───────────────────────────────────────

    def save(self, record: dict) -> None:
        table = self._get_table()
        try:
            table.put_item(Item=record)
            logger.info(
                "Saved inbound rule record '%s' for space '%s'.",
                record.get("rule_id"),
                record.get("space"),
            )
        except ClientError as exc:
            logger.error("DynamoDB PutItem failed: %s", exc)
            raise

    def get(self, space: str, rule_id: str) -> Optional[dict]:
        table = self._get_table()
        try:
            response = table.get_item(Key={"space": space, "rule_id": rule_id})
            return response.get("Item")
        except ClientError as exc:
            logger.error("DynamoDB GetItem failed for '%s' in '%s': %s", rule_id, space, exc)
            raise

    def list_by_space(self, space: str) -> list[dict]:
        """Query the partition for *space*, following ``LastEvaluatedKey``."""
        table = self._get_table()
        condition = Key("space").eq(space)
        try:
            response = table.query(KeyConditionExpression=condition)
            items: list[dict] = response.get("Items", [])

            while "LastEvaluatedKey" in response:
                response = table.query(
                    KeyConditionExpression=condition,
                    ExclusiveStartKey=response["LastEvaluatedKey"],
                )
                items.extend(response.get("Items", []))

            return items
        except ClientError as exc:
            logger.error("DynamoDB Query failed for space '%s': %s", space, exc)
            raise

    def delete(self, space: str, rule_id: str) -> bool:
        table = self._get_table()
        try:
            response = table.delete_item(
                Key={"space": space, "rule_id": rule_id},
                ReturnValues="ALL_OLD",
            )
            existed = bool(response.get("Attributes"))
            if existed:
                logger.info("Deleted inbound rule record '%s' for space '%s'.", rule_id, space)
            return existed
        except ClientError as exc:
            logger.error("DynamoDB DeleteItem failed for '%s' in '%s': %s", rule_id, space, exc)
            raise
