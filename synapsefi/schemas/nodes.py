"""
schemas/nodes.py
-----------------

Models for node resources (bank accounts, deposit accounts, cards)
and their paginated collection.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Node(BaseModel):
    node_id: Optional[str] = None
    user_id: Optional[str] = None
    type: Optional[str] = None
    full_dehydrate: bool = False
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, response: Dict[str, Any], **options: Any) -> "Node":
        return cls(
            node_id=response.get("_id"),
            user_id=response.get("user_id"),
            type=response.get("type"),
            full_dehydrate=options.get("full_dehydrate") in (True, "yes"),
            payload=response,
        )


class Nodes(BaseModel):
    page: Optional[int] = None
    page_count: Optional[int] = None
    limit: Optional[int] = None
    nodes_count: Optional[int] = None
    payload: List[Node] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: Dict[str, Any], **options: Any) -> "Nodes":
        return cls(
            page=response.get("page"),
            page_count=response.get("page_count"),
            limit=response.get("limit"),
            nodes_count=response.get("nodes_count"),
            payload=[Node.from_response(data, **options) for data in response.get("nodes") or []],
        )

    def __len__(self) -> int:
        return len(self.payload)
