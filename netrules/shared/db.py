"""
Database Helpers

psycopg2 connections with RealDictCursor rows, and the DDL for every table the
engine reads or writes.
"""

import logging
from typing import Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from . import config

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS user_groups (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        group_name TEXT NOT NULL,
        description TEXT,
        color_code VARCHAR(20),
        priority INTEGER,
        is_active BOOLEAN DEFAULT TRUE
    );

    CREATE TABLE IF NOT EXISTS traffic_types (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        type_name TEXT NOT NULL,
        description TEXT,
        category VARCHAR(50),
        bandwidth_priority INTEGER,
        is_active BOOLEAN DEFAULT TRUE
    );

    CREATE TABLE IF NOT EXISTS network_paths (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        path_name TEXT NOT NULL,
        description TEXT,
        path_type VARCHAR(50),
        reliability_score FLOAT,
        is_active BOOLEAN DEFAULT TRUE
    );

    CREATE TABLE IF NOT EXISTS tunnels (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        tunnel_name TEXT NOT NULL,
        description TEXT,
        tunnel_type VARCHAR(50),
        status VARCHAR(20),
        ping_ms FLOAT,
        is_active BOOLEAN DEFAULT TRUE
    );

    CREATE TABLE IF NOT EXISTS traffic_rules (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        rule_name TEXT NOT NULL,
        description TEXT,
        user_group_id UUID,
        traffic_type_id UUID,
        network_path_id UUID,
        tunnel_id UUID,
        action VARCHAR(10) NOT NULL DEFAULT 'route',
        priority INTEGER NOT NULL DEFAULT 100,
        bandwidth_limit_kbps FLOAT,
        time_conditions JSONB DEFAULT '{}'::jsonb,
        bandwidth_conditions JSONB DEFAULT '{}'::jsonb,
        location_conditions JSONB DEFAULT '{}'::jsonb,
        device_conditions JSONB DEFAULT '{}'::jsonb,
        is_enabled BOOLEAN DEFAULT TRUE,
        is_testing BOOLEAN DEFAULT FALSE,
        packets_matched BIGINT DEFAULT 0,
        bytes_matched BIGINT DEFAULT 0,
        last_matched_at TIMESTAMPTZ,
        created_at TIMESTAMPTZ DEFAULT NOW(),
        updated_at TIMESTAMPTZ DEFAULT NOW()
    );

    CREATE INDEX IF NOT EXISTS idx_traffic_rules_priority
        ON traffic_rules(priority);
    CREATE INDEX IF NOT EXISTS idx_traffic_rules_enabled
        ON traffic_rules(is_enabled);

    CREATE TABLE IF NOT EXISTS audit_logs (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        event_type VARCHAR(100) NOT NULL,
        event_category VARCHAR(50),
        action VARCHAR(100),
        details JSONB,
        severity VARCHAR(20),
        created_at TIMESTAMPTZ DEFAULT NOW()
    );

    CREATE INDEX IF NOT EXISTS idx_audit_logs_created_at
        ON audit_logs(created_at DESC);

    CREATE TABLE IF NOT EXISTS notifications (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        notification_type VARCHAR(50) DEFAULT 'system',
        severity VARCHAR(20) DEFAULT 'info',
        title TEXT,
        message TEXT NOT NULL,
        target_roles TEXT[],
        channels TEXT[],
        is_read BOOLEAN DEFAULT FALSE,
        created_at TIMESTAMPTZ DEFAULT NOW()
    );
"""


def get_db(database_url: Optional[str] = None):
    """Get database connection, or None when it cannot be opened."""
    url = database_url or config.DATABASE_URL
    if not url:
        return None
    try:
        return psycopg2.connect(url, cursor_factory=RealDictCursor)
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        return None


def ensure_schema(conn) -> bool:
    """Create engine tables if they don't exist."""
    try:
        cur = conn.cursor()
        cur.execute(SCHEMA_SQL)
        conn.commit()
        cur.close()
        return True
    except Exception as e:
        logger.error(f"Schema bootstrap failed: {e}")
        conn.rollback()
        return False
