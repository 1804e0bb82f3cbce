"""
schemas/transactions.py
------------------------

Models for transactions and their paginated collection.  A transaction
remembers the node it was fetched through when the response does not
say so itself.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Transaction(BaseModel):
    trans_id: Optional[str] = None
    node_id: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, response: Dict[str, Any], node_id: Optional[str] = None) -> "Transaction":
        return cls(trans_id=response.get("_id"), node_id=node_id, payload=response)


class Transactions(BaseModel):
    page: Optional[int] = None
    page_count: Optional[int] = None
    limit: Optional[int] = None
    trans_count: Optional[int] = None
    payload: List[Transaction] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: Dict[str, Any], node_id: Optional[str] = None) -> "Transactions":
        return cls(
            page=response.get("page"),
            page_count=response.get("page_count"),
            limit=response.get("limit"),
            trans_count=response.get("trans_count"),
            payload=[Transaction.from_response(data, node_id=node_id) for data in response.get("trans") or []],
        )

    def __len__(self) -> int:
        return len(self.payload)
