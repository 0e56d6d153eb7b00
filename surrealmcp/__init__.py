"""SurrealMCP — guarded tool-calling adapter for SurrealDB.

Exposes select / create / insert / update / upsert / delete / relate
operations as callable tools. Clause parameters that must be spliced into
SurrealQL as raw text are checked by the snippet validator in
``surrealmcp.guard`` before any query is built.
"""

__version__ = "1.0.0"
