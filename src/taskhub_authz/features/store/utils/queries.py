"""Entity store SQL query constants.

Queries are parameterized by schema and use asyncpg positional parameters.
Organization, team and project updates are compare-and-swap on ``version``.
"""

SCHEMA_DDL = """
    CREATE SCHEMA IF NOT EXISTS {schema};

    CREATE TABLE IF NOT EXISTS {schema}.actors (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL DEFAULT '',
        global_role TEXT NOT NULL,
        organization_id TEXT,
        team_memberships JSONB NOT NULL DEFAULT '{{}}',
        is_active BOOLEAN NOT NULL DEFAULT true
    );

    CREATE TABLE IF NOT EXISTS {schema}.organizations (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL DEFAULT '',
        owner_id TEXT NOT NULL,
        admin_ids TEXT[] NOT NULL DEFAULT '{{}}',
        is_active BOOLEAN NOT NULL DEFAULT true,
        version INTEGER NOT NULL DEFAULT 1,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );

    CREATE TABLE IF NOT EXISTS {schema}.teams (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL DEFAULT '',
        organization_id TEXT,
        lead_id TEXT NOT NULL,
        members JSONB NOT NULL DEFAULT '{{}}',
        visibility TEXT NOT NULL DEFAULT 'organization',
        is_active BOOLEAN NOT NULL DEFAULT true,
        version INTEGER NOT NULL DEFAULT 1,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );

    CREATE TABLE IF NOT EXISTS {schema}.projects (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL DEFAULT '',
        created_by TEXT NOT NULL,
        organization_id TEXT,
        team_id TEXT,
        visibility TEXT NOT NULL DEFAULT 'private',
        members JSONB NOT NULL DEFAULT '{{}}',
        is_active BOOLEAN NOT NULL DEFAULT true,
        version INTEGER NOT NULL DEFAULT 1,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );

    CREATE TABLE IF NOT EXISTS {schema}.resources (
        resource_type TEXT NOT NULL,
        id TEXT NOT NULL,
        project_id TEXT,
        created_by TEXT NOT NULL,
        data JSONB NOT NULL,
        PRIMARY KEY (resource_type, id)
    );

    CREATE INDEX IF NOT EXISTS idx_resources_project ON {schema}.resources (resource_type, project_id);

    CREATE TABLE IF NOT EXISTS {schema}.audit_records (
        id TEXT PRIMARY KEY,
        resource_id TEXT NOT NULL,
        action TEXT NOT NULL,
        field TEXT,
        actor_id TEXT NOT NULL,
        actor_name TEXT NOT NULL DEFAULT '',
        old_value JSONB,
        new_value JSONB,
        details TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );

    CREATE INDEX IF NOT EXISTS idx_audit_resource_created ON {schema}.audit_records (resource_id, created_at DESC);
"""

# Actors
ACTOR_GET_BY_ID = """
    SELECT * FROM {schema}.actors WHERE id = $1
"""

ACTOR_UPSERT = """
    INSERT INTO {schema}.actors (id, name, global_role, organization_id, team_memberships, is_active)
    VALUES ($1, $2, $3, $4, $5::jsonb, $6)
    ON CONFLICT (id) DO UPDATE SET
        name = EXCLUDED.name,
        global_role = EXCLUDED.global_role,
        organization_id = EXCLUDED.organization_id,
        team_memberships = EXCLUDED.team_memberships,
        is_active = EXCLUDED.is_active
    RETURNING *
"""

ACTOR_DETACH_ORGANIZATION = """
    UPDATE {schema}.actors SET
        organization_id = NULL,
        global_role = CASE WHEN global_role = 'super_admin' THEN global_role ELSE 'member' END
    WHERE organization_id = $1
"""

# Organizations
ORGANIZATION_GET_BY_ID = """
    SELECT * FROM {schema}.organizations WHERE id = $1
"""

ORGANIZATION_INSERT = """
    INSERT INTO {schema}.organizations (id, name, owner_id, admin_ids, is_active, version, updated_at)
    VALUES ($1, $2, $3, $4, $5, $6, $7)
    ON CONFLICT (id) DO NOTHING
    RETURNING *
"""

ORGANIZATION_UPDATE_CAS = """
    UPDATE {schema}.organizations SET
        name = $2,
        owner_id = $3,
        admin_ids = $4,
        is_active = $5,
        updated_at = $7,
        version = version + 1
    WHERE id = $1 AND version = $6
    RETURNING *
"""

ORGANIZATION_DEACTIVATE = """
    UPDATE {schema}.organizations SET
        is_active = false,
        version = version + 1,
        updated_at = NOW()
    WHERE id = $1
    RETURNING id
"""

# Teams
TEAM_GET_BY_ID = """
    SELECT * FROM {schema}.teams WHERE id = $1
"""

TEAM_INSERT = """
    INSERT INTO {schema}.teams (id, name, organization_id, lead_id, members, visibility, is_active, version, updated_at)
    VALUES ($1, $2, $3, $4, $5::jsonb, $6, $7, $8, $9)
    ON CONFLICT (id) DO NOTHING
    RETURNING *
"""

TEAM_UPDATE_CAS = """
    UPDATE {schema}.teams SET
        name = $2,
        organization_id = $3,
        lead_id = $4,
        members = $5::jsonb,
        visibility = $6,
        is_active = $7,
        updated_at = $9,
        version = version + 1
    WHERE id = $1 AND version = $8
    RETURNING *
"""

TEAM_DETACH_ORGANIZATION = """
    UPDATE {schema}.teams SET organization_id = NULL, version = version + 1, updated_at = NOW()
    WHERE organization_id = $1
"""

# Projects
PROJECT_GET_BY_ID = """
    SELECT * FROM {schema}.projects WHERE id = $1
"""

PROJECT_INSERT = """
    INSERT INTO {schema}.projects (id, name, created_by, organization_id, team_id, visibility, members, is_active, version, updated_at)
    VALUES ($1, $2, $3, $4, $5, $6, $7::jsonb, $8, $9, $10)
    ON CONFLICT (id) DO NOTHING
    RETURNING *
"""

PROJECT_UPDATE_CAS = """
    UPDATE {schema}.projects SET
        name = $2,
        created_by = $3,
        organization_id = $4,
        team_id = $5,
        visibility = $6,
        members = $7::jsonb,
        is_active = $8,
        updated_at = $10,
        version = version + 1
    WHERE id = $1 AND version = $9
    RETURNING *
"""

PROJECT_DELETE = """
    DELETE FROM {schema}.projects WHERE id = $1 RETURNING id
"""

PROJECT_DETACH_ORGANIZATION = """
    UPDATE {schema}.projects SET organization_id = NULL, version = version + 1, updated_at = NOW()
    WHERE organization_id = $1
"""

# Resources
RESOURCE_GET = """
    SELECT data FROM {schema}.resources WHERE resource_type = $1 AND id = $2
"""

RESOURCE_LIST = """
    SELECT data FROM {schema}.resources WHERE resource_type = $1 ORDER BY id
"""

RESOURCE_LIST_BY_PROJECT = """
    SELECT data FROM {schema}.resources WHERE resource_type = $1 AND project_id = $2 ORDER BY id
"""

RESOURCE_UPSERT = """
    INSERT INTO {schema}.resources (resource_type, id, project_id, created_by, data)
    VALUES ($1, $2, $3, $4, $5::jsonb)
    ON CONFLICT (resource_type, id) DO UPDATE SET
        project_id = EXCLUDED.project_id,
        created_by = EXCLUDED.created_by,
        data = EXCLUDED.data
"""

RESOURCE_DELETE = """
    DELETE FROM {schema}.resources WHERE resource_type = $1 AND id = $2 RETURNING id
"""

TASKS_DELETE_BY_PROJECT = """
    DELETE FROM {schema}.resources WHERE resource_type = 'task' AND project_id = $1
"""

DOCUMENTS_UNLINK_PROJECT = """
    UPDATE {schema}.resources SET
        project_id = NULL,
        data = jsonb_set(
            jsonb_set(data, '{{project_id}}', 'null'::jsonb),
            '{{is_public}}', 'false'::jsonb
        )
    WHERE resource_type = 'document' AND project_id = $1
"""

# Audit records
AUDIT_INSERT = """
    INSERT INTO {schema}.audit_records (
        id, resource_id, action, field, actor_id, actor_name, old_value, new_value, details, created_at
    ) VALUES ($1, $2, $3, $4, $5, $6, $7::jsonb, $8::jsonb, $9, $10)
"""

AUDIT_LIST_BY_RESOURCE = """
    SELECT * FROM {schema}.audit_records
    WHERE resource_id = $1
    ORDER BY created_at DESC, id DESC
    LIMIT $2 OFFSET $3
"""

AUDIT_COUNT_BY_RESOURCE = """
    SELECT COUNT(*) FROM {schema}.audit_records WHERE resource_id = $1
"""
