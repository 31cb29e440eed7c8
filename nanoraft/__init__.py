"""JSON-RPC over framed TCP, Raft message types, behaviour trees and small helpers."""

__version__ = "0.1.0"