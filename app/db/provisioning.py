# app/db/provisioning.py
# Idempotent DDL catalog for the document store and a best-effort runner.
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

PHASES = ("extensions", "tables", "indexes", "functions", "triggers", "security")

# Hosted stores expose auth.role(); plain Postgres does not.
HAS_AUTH_ROLE = """
SELECT EXISTS (
  SELECT 1 FROM pg_proc p JOIN pg_namespace n ON n.oid = p.pronamespace
  WHERE n.nspname = 'auth' AND p.proname = 'role'
)
"""


@dataclass(frozen=True)
class Statement:
    name: str
    phase: str
    sql: str
    # SELECT returning a boolean; when false the statement is skipped
    requires: Optional[str] = None


@dataclass
class ProvisionReport:
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return f"applied={len(self.applied)} skipped={len(self.skipped)} failed={len(self.failed)}"


# ---------------- extensions ----------------
EXTENSIONS = [
    Statement("extension:vector", "extensions", 'CREATE EXTENSION IF NOT EXISTS "vector"'),
    Statement("extension:pg_trgm", "extensions", 'CREATE EXTENSION IF NOT EXISTS "pg_trgm"'),
    Statement("extension:uuid-ossp", "extensions", 'CREATE EXTENSION IF NOT EXISTS "uuid-ossp"'),
]

# ---------------- tables ----------------
TABLES = [
    Statement("table:documents", "tables", """
        CREATE TABLE IF NOT EXISTS documents (
          id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
          title TEXT NOT NULL,
          slug TEXT UNIQUE NOT NULL,
          domain TEXT NOT NULL,
          template_id TEXT NOT NULL,
          theme_id TEXT,
          render_mode TEXT NOT NULL CHECK (render_mode IN ('static', 'dynamic')),
          cache_key TEXT,
          last_rendered TIMESTAMPTZ,
          embeddings_version INTEGER NOT NULL DEFAULT 1,
          metadata JSONB DEFAULT '{}',
          created_at TIMESTAMPTZ DEFAULT NOW(),
          updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """),
    Statement("table:sections", "tables", """
        CREATE TABLE IF NOT EXISTS sections (
          id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
          document_id UUID NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
          title TEXT NOT NULL,
          slug TEXT NOT NULL,
          order_index INTEGER NOT NULL,
          level INTEGER NOT NULL DEFAULT 1,
          content_mdx TEXT NOT NULL,
          lock_mode TEXT NOT NULL DEFAULT 'locked' CHECK (lock_mode IN ('locked', 'semi-dynamic', 'dynamic')),
          roles TEXT[] DEFAULT ARRAY['all'],
          search_vector tsvector,
          metadata JSONB DEFAULT '{}',
          created_at TIMESTAMPTZ DEFAULT NOW(),
          updated_at TIMESTAMPTZ DEFAULT NOW(),
          UNIQUE (document_id, slug)
        )
    """),
    Statement("table:section_versions", "tables", """
        CREATE TABLE IF NOT EXISTS section_versions (
          id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
          section_id UUID NOT NULL REFERENCES sections(id) ON DELETE CASCADE,
          version_number INTEGER NOT NULL,
          content_mdx TEXT NOT NULL,
          metadata JSONB DEFAULT '{}',
          created_at TIMESTAMPTZ DEFAULT NOW(),
          UNIQUE (section_id, version_number)
        )
    """),
    Statement("table:embeddings", "tables", """
        CREATE TABLE IF NOT EXISTS embeddings (
          id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
          section_id UUID NOT NULL REFERENCES sections(id) ON DELETE CASCADE,
          content_hash TEXT NOT NULL,
          embedding vector(1536),
          model_version TEXT NOT NULL DEFAULT 'text-embedding-3-small',
          created_at TIMESTAMPTZ DEFAULT NOW(),
          UNIQUE (section_id, content_hash)
        )
    """),
    Statement("table:assets", "tables", """
        CREATE TABLE IF NOT EXISTS assets (
          id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
          document_id UUID NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
          filename TEXT NOT NULL,
          storage_path TEXT NOT NULL,
          cdn_url TEXT NOT NULL,
          mime_type TEXT NOT NULL,
          size_bytes INTEGER,
          width INTEGER,
          height INTEGER,
          alt_text TEXT,
          metadata JSONB DEFAULT '{}',
          created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """),
    Statement("table:chat_cache", "tables", """
        CREATE TABLE IF NOT EXISTS chat_cache (
          id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
          query_hash TEXT NOT NULL UNIQUE,
          query_text TEXT NOT NULL,
          response_data JSONB NOT NULL,
          document_id UUID REFERENCES documents(id) ON DELETE CASCADE,
          expires_at TIMESTAMPTZ NOT NULL,
          created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """),
    Statement("table:analytics_events", "tables", """
        CREATE TABLE IF NOT EXISTS analytics_events (
          id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
          event_type TEXT NOT NULL,
          document_id UUID REFERENCES documents(id) ON DELETE SET NULL,
          section_id UUID REFERENCES sections(id) ON DELETE SET NULL,
          user_role TEXT,
          session_id TEXT,
          metadata JSONB DEFAULT '{}',
          created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """),
]

# ---------------- indexes ----------------
_INDEX_DDL = [
    ("idx_documents_slug", "documents(slug)"),
    ("idx_documents_domain", "documents(domain)"),
    ("idx_documents_template", "documents(template_id)"),
    ("idx_sections_document_id", "sections(document_id)"),
    ("idx_sections_order", "sections(document_id, order_index)"),
    ("idx_sections_search_vector", "sections USING gin(search_vector)"),
    ("idx_sections_roles", "sections USING gin(roles)"),
    ("idx_embeddings_section_id", "embeddings(section_id)"),
    # hnsw keeps recall on small/fresh tables; ivfflat needs data before build
    ("idx_embeddings_vector", "embeddings USING hnsw (embedding vector_cosine_ops)"),
    ("idx_assets_document_id", "assets(document_id)"),
    ("idx_assets_mime_type", "assets(mime_type)"),
    ("idx_chat_cache_query_hash", "chat_cache(query_hash)"),
    ("idx_chat_cache_expires_at", "chat_cache(expires_at)"),
    ("idx_analytics_events_type", "analytics_events(event_type)"),
    ("idx_analytics_events_document", "analytics_events(document_id)"),
    ("idx_analytics_events_created_at", "analytics_events(created_at)"),
]

INDEXES = [
    Statement(f"index:{name}", "indexes", f"CREATE INDEX IF NOT EXISTS {name} ON {target}")
    for name, target in _INDEX_DDL
]

# ---------------- functions ----------------
FUNCTIONS = [
    Statement("function:update_updated_at_column", "functions", """
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
          NEW.updated_at = NOW();
          RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """),
    Statement("function:update_search_vector", "functions", """
        CREATE OR REPLACE FUNCTION update_search_vector()
        RETURNS TRIGGER AS $$
        BEGIN
          NEW.search_vector := to_tsvector('english', coalesce(NEW.title, '') || ' ' || coalesce(NEW.content_mdx, ''));
          RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """),
    Statement("function:save_section_version", "functions", """
        CREATE OR REPLACE FUNCTION save_section_version()
        RETURNS TRIGGER AS $$
        DECLARE
          next_version INTEGER;
        BEGIN
          SELECT COALESCE(MAX(version_number), 0) + 1
            INTO next_version
            FROM section_versions
           WHERE section_id = NEW.id;

          INSERT INTO section_versions (section_id, version_number, content_mdx, metadata)
          VALUES (NEW.id, next_version, NEW.content_mdx, NEW.metadata);

          RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
    """),
]

# ---------------- triggers ----------------
def _trigger(name: str, table: str, timing: str, function: str) -> Statement:
    return Statement(
        f"trigger:{name}",
        "triggers",
        f"DROP TRIGGER IF EXISTS {name} ON {table}; "
        f"CREATE TRIGGER {name} {timing} ON {table} FOR EACH ROW EXECUTE FUNCTION {function}()",
    )


TRIGGERS = [
    _trigger("update_documents_updated_at", "documents", "BEFORE UPDATE", "update_updated_at_column"),
    _trigger("update_sections_updated_at", "sections", "BEFORE UPDATE", "update_updated_at_column"),
    _trigger("update_sections_search_vector", "sections", "BEFORE INSERT OR UPDATE", "update_search_vector"),
    _trigger("save_section_version_trigger", "sections", "AFTER UPDATE", "save_section_version"),
]

# ---------------- row level security ----------------
_RLS_TABLES = (
    "documents", "sections", "section_versions", "embeddings",
    "assets", "chat_cache", "analytics_events",
)
_PUBLIC_READ_TABLES = ("documents", "sections", "assets")


def _policy(name: str, table: str, clause: str) -> Statement:
    return Statement(
        f"policy:{table}:{name}",
        "security",
        f'DROP POLICY IF EXISTS "{name}" ON {table}; CREATE POLICY "{name}" ON {table} {clause}',
        requires=HAS_AUTH_ROLE,
    )


SECURITY = (
    [
        Statement(f"rls:{t}", "security", f"ALTER TABLE {t} ENABLE ROW LEVEL SECURITY", requires=HAS_AUTH_ROLE)
        for t in _RLS_TABLES
    ]
    + [
        _policy(f"Allow public read access to {t}", t, "FOR SELECT USING (true)")
        for t in _PUBLIC_READ_TABLES
    ]
    + [
        _policy(f"Service role full access {t}", t, "FOR ALL USING (auth.role() = 'service_role')")
        for t in _RLS_TABLES
    ]
)

CATALOG: tuple[Statement, ...] = tuple(EXTENSIONS + TABLES + INDEXES + FUNCTIONS + TRIGGERS + SECURITY)


def statements_for(phases: Iterable[str] | None = None) -> list[Statement]:
    if not phases:
        return list(CATALOG)
    wanted = set(phases)
    unknown = wanted - set(PHASES)
    if unknown:
        raise ValueError(f"Unknown provisioning phase(s): {sorted(unknown)}")
    return [s for s in CATALOG if s.phase in wanted]


def apply_statements(bind: Engine, statements: Sequence[Statement]) -> ProvisionReport:
    """
    Runs every statement in its own transaction. A failure is logged and
    recorded; later statements still run. Statements that depend on a failed
    one will usually fail too, there is no global rollback.
    """
    report = ProvisionReport()
    for stmt in statements:
        try:
            with bind.begin() as conn:
                if stmt.requires is not None and not conn.execute(text(stmt.requires)).scalar():
                    logger.info("Skipped %s (precondition not met)", stmt.name)
                    report.skipped.append(stmt.name)
                    continue
                conn.exec_driver_sql(stmt.sql)
        except SQLAlchemyError as exc:
            reason = str(getattr(exc, "orig", None) or exc).strip()
            logger.error("Failed %s: %s", stmt.name, reason)
            report.failed.append((stmt.name, reason))
            continue
        logger.info("Applied %s", stmt.name)
        report.applied.append(stmt.name)
    return report


def apply_schema(bind: Engine, phases: Iterable[str] | None = None) -> ProvisionReport:
    statements = statements_for(phases)
    logger.info("Provisioning %d statement(s)", len(statements))
    report = apply_statements(bind, statements)
    logger.info("Provisioning finished: %s", report.summary())
    return report
