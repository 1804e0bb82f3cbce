"""
schemas/subnets.py
-------------------

Models for subnets (debit cards and account/routing numbers issued on
a node) and their paginated collection.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Subnet(BaseModel):
    subnet_id: Optional[str] = None
    node_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "Subnet":
        return cls(subnet_id=response.get("_id"), node_id=response.get("node_id"), payload=response)


class Subnets(BaseModel):
    page: Optional[int] = None
    page_count: Optional[int] = None
    limit: Optional[int] = None
    subnets_count: Optional[int] = None
    node_id: Optional[str] = None
    payload: List[Subnet] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "Subnets":
        return cls(
            page=response.get("page"),
            page_count=response.get("page_count"),
            limit=response.get("limit"),
            subnets_count=response.get("subnets_count"),
            node_id=response.get("node_id"),
            payload=[Subnet.from_response(data) for data in response.get("subnets") or []],
        )

    def __len__(self) -> int:
        return len(self.payload)
