"""
schemas/subscriptions.py
-------------------------

Models for platform webhook subscriptions.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Subscription(BaseModel):
    subscription_id: Optional[str] = None
    url: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "Subscription":
        return cls(subscription_id=response.get("_id"), url=response.get("url"), payload=response)


class Subscriptions(BaseModel):
    page: Optional[int] = None
    page_count: Optional[int] = None
    limit: Optional[int] = None
    subscriptions_count: Optional[int] = None
    payload: List[Subscription] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "Subscriptions":
        return cls(
            page=response.get("page"),
            page_count=response.get("page_count"),
            limit=response.get("limit"),
            subscriptions_count=response.get("subscriptions_count"),
            payload=[Subscription.from_response(data) for data in response.get("subscriptions") or []],
        )

    def __len__(self) -> int:
        return len(self.payload)
