"""Pydantic models for SynapseFI resources."""

from synapsefi.schemas.auth import AccessToken, NodeCreation, OAuthToken, parse_node_creation
from synapsefi.schemas.nodes import Node, Nodes
from synapsefi.schemas.subnets import Subnet, Subnets
from synapsefi.schemas.subscriptions import Subscription, Subscriptions
from synapsefi.schemas.transactions import Transaction, Transactions

__all__ = [
    "AccessToken",
    "NodeCreation",
    "OAuthToken",
    "parse_node_creation",
    "Node",
    "Nodes",
    "Subnet",
    "Subnets",
    "Subscription",
    "Subscriptions",
    "Transaction",
    "Transactions",
]
