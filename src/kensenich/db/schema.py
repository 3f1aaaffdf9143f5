"""
KensenichManager - Database schema.

All tables use a TEXT UUID primary key and ISO 8601 text timestamps.
The script is idempotent (IF NOT EXISTS) and runs at application startup.
"""

import logging

from kensenich.db.client import Database
from kensenich.db.records import now_iso, today_iso

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS goals (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    category TEXT,
    target_date DATETIME,
    status TEXT DEFAULT 'active',
    progress INTEGER DEFAULT 0,
    metrics TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    status TEXT DEFAULT 'todo',
    priority INTEGER DEFAULT 0,
    difficulty INTEGER DEFAULT 1,
    estimated_sessions INTEGER DEFAULT 1,
    category TEXT DEFAULT 'general',
    tags TEXT,
    due_date DATETIME,
    goal_id TEXT,
    parent_task_id TEXT,
    order_index INTEGER DEFAULT 0,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    completed_at DATETIME,
    FOREIGN KEY (goal_id) REFERENCES goals(id) ON DELETE SET NULL,
    FOREIGN KEY (parent_task_id) REFERENCES tasks(id) ON DELETE SET NULL
);

CREATE TABLE IF NOT EXISTS work_sessions (
    id TEXT PRIMARY KEY,
    task_id TEXT NOT NULL,
    started_at DATETIME NOT NULL,
    ended_at DATETIME,
    duration_minutes INTEGER DEFAULT 30,
    status TEXT DEFAULT 'running',
    documentation TEXT,
    ai_summary TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (task_id) REFERENCES tasks(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS crm_contacts (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    type TEXT DEFAULT 'client',
    email TEXT,
    phone TEXT,
    company TEXT,
    notes TEXT,
    last_contact DATETIME,
    next_followup DATETIME,
    tags TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS crm_tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    task_type TEXT DEFAULT 'todo',
    priority TEXT DEFAULT 'normal',
    status TEXT DEFAULT 'pending',
    due_date DATETIME,
    contact_id TEXT,
    reminder_at DATETIME,
    completed_at DATETIME,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (contact_id) REFERENCES crm_contacts(id) ON DELETE SET NULL
);

CREATE TABLE IF NOT EXISTS sales_pipeline_stages (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    position INTEGER NOT NULL DEFAULT 999,
    color TEXT DEFAULT '#00ff88',
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS sales_pipeline_contacts (
    id TEXT PRIMARY KEY,
    contact_id TEXT NOT NULL,
    stage_id TEXT NOT NULL,
    potential_value REAL DEFAULT 0,
    probability INTEGER DEFAULT 50,
    notes TEXT,
    last_interaction DATETIME,
    next_action TEXT,
    next_action_date DATETIME,
    won_date DATETIME,
    lost_date DATETIME,
    lost_reason TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (contact_id) REFERENCES crm_contacts(id) ON DELETE CASCADE,
    FOREIGN KEY (stage_id) REFERENCES sales_pipeline_stages(id) ON DELETE RESTRICT
);

CREATE TABLE IF NOT EXISTS crm_deals (
    id TEXT PRIMARY KEY,
    contact_id TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    stage_id TEXT NOT NULL,
    deal_value REAL DEFAULT 0,
    currency TEXT DEFAULT 'EUR',
    probability INTEGER DEFAULT 50,
    expected_close_date DATETIME,
    actual_close_date DATETIME,
    deal_source TEXT,
    deal_type TEXT,
    priority TEXT DEFAULT 'medium',
    status TEXT DEFAULT 'open',
    lost_reason TEXT,
    lost_reason_details TEXT,
    tags TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (contact_id) REFERENCES crm_contacts(id) ON DELETE CASCADE,
    FOREIGN KEY (stage_id) REFERENCES sales_pipeline_stages(id) ON DELETE RESTRICT
);

CREATE TABLE IF NOT EXISTS job_applications (
    id TEXT PRIMARY KEY,
    company TEXT NOT NULL,
    position TEXT NOT NULL,
    status TEXT DEFAULT 'applied',
    applied_date DATETIME,
    interview_date DATETIME,
    notes TEXT,
    salary_range TEXT,
    job_url TEXT,
    contact_person TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS content_ideas (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    platform TEXT,
    category TEXT,
    status TEXT DEFAULT 'idea',
    priority INTEGER DEFAULT 0,
    thumbnail_url TEXT,
    notes TEXT,
    target_date DATETIME,
    published_date DATETIME,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS content_archive (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    element_type TEXT NOT NULL,
    content TEXT,
    file_url TEXT,
    tags TEXT,
    usage_count INTEGER DEFAULT 0,
    last_used DATETIME,
    platform TEXT,
    category TEXT,
    notes TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS calendar_events (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    event_type TEXT DEFAULT 'meeting',
    start_time DATETIME NOT NULL,
    end_time DATETIME,
    location TEXT,
    attendees TEXT,
    reminder_minutes INTEGER DEFAULT 15,
    status TEXT DEFAULT 'scheduled',
    related_contact_id TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (related_contact_id) REFERENCES crm_contacts(id) ON DELETE SET NULL
);

CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    status TEXT DEFAULT 'active',
    color TEXT,
    website_url TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS branding_assets (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL,
    asset_type TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    file_url TEXT,
    file_type TEXT,
    asset_version TEXT DEFAULT '1.0',
    tags TEXT,
    is_primary INTEGER DEFAULT 0,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (project_id) REFERENCES projects(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS sops (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    process_type TEXT,
    steps TEXT,
    created_from_sessions TEXT,
    ai_generated INTEGER DEFAULT 0,
    version INTEGER NOT NULL DEFAULT 1,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS daily_habits (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    target_count INTEGER DEFAULT 5,
    checked_count INTEGER DEFAULT 0,
    completed INTEGER DEFAULT 0,
    last_reset DATE,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS ai_user_facts (
    id TEXT PRIMARY KEY,
    category TEXT DEFAULT 'info',
    key TEXT UNIQUE,
    value TEXT,
    source TEXT DEFAULT 'explicit',
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS ai_conversations (
    id TEXT PRIMARY KEY,
    title TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS ai_messages (
    id TEXT PRIMARY KEY,
    conversation_id TEXT NOT NULL,
    role TEXT NOT NULL,
    content TEXT,
    tool_name TEXT,
    tool_result TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (conversation_id) REFERENCES ai_conversations(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);
CREATE INDEX IF NOT EXISTS idx_tasks_priority ON tasks(priority);
CREATE INDEX IF NOT EXISTS idx_sessions_task ON work_sessions(task_id);
CREATE INDEX IF NOT EXISTS idx_sessions_started ON work_sessions(started_at);
CREATE INDEX IF NOT EXISTS idx_contacts_followup ON crm_contacts(next_followup);
CREATE INDEX IF NOT EXISTS idx_goals_status ON goals(status);
CREATE INDEX IF NOT EXISTS idx_pipeline_contacts_stage ON sales_pipeline_contacts(stage_id);
CREATE INDEX IF NOT EXISTS idx_deals_stage ON crm_deals(stage_id);
CREATE INDEX IF NOT EXISTS idx_deals_status ON crm_deals(status);
CREATE INDEX IF NOT EXISTS idx_messages_conversation ON ai_messages(conversation_id);
"""

# Seeded on first start so the assistant has something to track
DEFAULT_HABITS = [
    ("habit-1", "Write job applications", 5),
    ("habit-2", "Outreach messages", 5),
    ("habit-3", "Dumbbell sets", 5),
]


# Default sales pipeline, in board order; won/lost are the closing stages
DEFAULT_STAGES = [
    ("stage-lead", "Lead", 1, "#3b82f6"),
    ("stage-contacted", "Contacted", 2, "#8b5cf6"),
    ("stage-qualified", "Qualified", 3, "#6366f1"),
    ("stage-proposal", "Proposal Sent", 4, "#06b6d4"),
    ("stage-negotiation", "Negotiation", 5, "#f59e0b"),
    ("stage-won", "Won", 6, "#00ff88"),
    ("stage-lost", "Lost", 7, "#ef4444"),
]


async def init_schema(db: Database, seed: bool = True) -> None:
    """Create all tables and indexes, then seed the default habits and pipeline stages."""
    db.executescript(SCHEMA_SQL)
    logger.info("Database schema ready")

    if not seed:
        return

    count = await db.fetch_value("SELECT COUNT(*) FROM daily_habits")
    if count == 0:
        for habit_id, title, target in DEFAULT_HABITS:
            await db.execute(
                "INSERT INTO daily_habits (id, title, target_count, last_reset, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (habit_id, title, target, today_iso(), now_iso(), now_iso()),
            )
        logger.info(f"Seeded {len(DEFAULT_HABITS)} default habits")

    timestamp = now_iso()
    for stage_id, name, position, color in DEFAULT_STAGES:
        await db.execute(
            "INSERT OR IGNORE INTO sales_pipeline_stages (id, name, position, color, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (stage_id, name, position, color, timestamp, timestamp),
        )
