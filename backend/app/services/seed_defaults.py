"""Seed demo prompts, context templates, and workflow metrics.

Idempotent: each table is checked independently and only seeded while it is
empty, so running the seeder twice never duplicates rows and never touches a
table that already holds data.

Run as a one-shot tool:

    python -m app.services.seed_defaults [--database-url URL] [--prune-days N]
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import Database
from app.models.context_template import ContextTemplate
from app.models.prompt import Prompt
from app.models.workflow_metric import WorkflowMetric
from app.services.workflow_metrics import prune_metrics

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# PROMPTS (10 rows)
# ═══════════════════════════════════════════════════════════════════════════════

DEMO_PROMPTS = [
    {
        "name": "Deposition Summary",
        "model": "gpt-4",
        "template": "Summarize the following deposition transcript, highlighting: 1) Key factual admissions, 2) Contradictions, 3) Areas requiring follow-up",
        "performance_score": 0.95,
    },
    {
        "name": "Action Item Extraction",
        "model": "claude-3-opus",
        "template": "Extract actionable items from this legal document. Format as: [PRIORITY] Action | Deadline | Responsible Party",
        "performance_score": 0.92,
    },
    {
        "name": "Evidence Classification",
        "model": "gpt-4-vision",
        "template": "Analyze this document image and classify evidence by: 1) Type, 2) Relevance (1-10), 3) Admissibility concerns",
        "performance_score": 0.88,
    },
    {
        "name": "Contract Clause Analysis",
        "model": "gpt-4",
        "template": "Review the following contract clauses and identify: 1) Potential risks, 2) Ambiguities, 3) Missing standard provisions, 4) Recommendations for negotiation",
        "performance_score": 0.91,
    },
    {
        "name": "Legal Research Summary",
        "model": "claude-3-opus",
        "template": "Research and summarize case law related to [TOPIC]. Include: 1) Relevant precedents, 2) Jurisdiction-specific rulings, 3) Key legal principles, 4) Potential arguments",
        "performance_score": 0.89,
    },
    {
        "name": "Discovery Request Generation",
        "model": "gpt-4",
        "template": "Generate discovery requests based on the case facts. Include: 1) Interrogatories, 2) Requests for Production, 3) Requests for Admission. Format according to [JURISDICTION] rules.",
        "performance_score": 0.87,
    },
    {
        "name": "Litigation Risk Assessment",
        "model": "gpt-4",
        "template": "Assess litigation risk for this case. Analyze: 1) Strengths and weaknesses, 2) Probability of success (percentage), 3) Potential damages/exposure, 4) Settlement considerations",
        "performance_score": 0.90,
    },
    {
        "name": "Brief Argument Outliner",
        "model": "claude-3-opus",
        "template": "Create an outline for a legal brief on [ISSUE]. Structure: 1) Statement of the Issue, 2) Statement of Facts, 3) Legal Arguments with supporting cases, 4) Conclusion",
        "performance_score": 0.93,
    },
    {
        "name": "Client Communication Drafter",
        "model": "gpt-3.5-turbo",
        "template": "Draft a client communication regarding [TOPIC]. Tone: Professional but accessible. Include: 1) Current status, 2) Next steps, 3) Required client actions, 4) Timeline",
        "performance_score": 0.86,
    },
    {
        "name": "Compliance Checklist Generator",
        "model": "gpt-4",
        "template": "Generate a compliance checklist for [REGULATION/LAW]. Include: 1) Required actions, 2) Documentation needed, 3) Deadlines, 4) Responsible parties, 5) Penalties for non-compliance",
        "performance_score": 0.88,
    },
]

# ═══════════════════════════════════════════════════════════════════════════════
# CONTEXT TEMPLATES (5 rows)
# ═══════════════════════════════════════════════════════════════════════════════

DEMO_CONTEXT_TEMPLATES = [
    {
        "name": "Case Background Context",
        "description": "Provides comprehensive case background for AI analysis",
        "template": "Case Name: [NAME]\nCase Number: [NUMBER]\nJurisdiction: [JURISDICTION]\nCase Type: [TYPE]\nParties: [PARTIES]\nKey Issues: [ISSUES]\nProcedural History: [HISTORY]",
        "category": "Case Management",
    },
    {
        "name": "Document Review Context",
        "description": "Context for document review and analysis",
        "template": "Document Type: [TYPE]\nDate: [DATE]\nParties: [PARTIES]\nPurpose: [PURPOSE]\nKey Terms to Identify: [TERMS]\nRisk Factors to Consider: [RISKS]",
        "category": "Document Analysis",
    },
    {
        "name": "Legal Research Context",
        "description": "Framework for legal research queries",
        "template": "Legal Issue: [ISSUE]\nJurisdiction: [JURISDICTION]\nRelevant Statutes: [STATUTES]\nTime Period: [PERIOD]\nSpecific Questions: [QUESTIONS]",
        "category": "Research",
    },
    {
        "name": "Deposition Prep Context",
        "description": "Context for deposition preparation",
        "template": "Deponent: [NAME]\nRole in Case: [ROLE]\nKey Topics: [TOPICS]\nDocument References: [DOCUMENTS]\nPrior Testimony: [PRIOR]\nObjectives: [OBJECTIVES]",
        "category": "Discovery",
    },
    {
        "name": "Contract Analysis Context",
        "description": "Framework for contract review",
        "template": "Contract Type: [TYPE]\nParties: [PARTIES]\nKey Terms: [TERMS]\nDeal Value: [VALUE]\nSpecial Considerations: [CONSIDERATIONS]\nRisk Tolerance: [RISK_LEVEL]",
        "category": "Contracts",
    },
]

# ═══════════════════════════════════════════════════════════════════════════════
# WORKFLOW METRICS (5 rows)
# ═══════════════════════════════════════════════════════════════════════════════

DEMO_WORKFLOW_METRICS = [
    {
        "workflow_id": "wf_001",
        "workflow_name": "Deposition Analysis Pipeline",
        "execution_time": 45.2,
        "success": True,
        "prompt_id": 1,
        "model_used": "gpt-4",
        "tokens_used": 3500,
        "cost": 0.105,
    },
    {
        "workflow_id": "wf_002",
        "workflow_name": "Contract Review Workflow",
        "execution_time": 62.8,
        "success": True,
        "prompt_id": 4,
        "model_used": "gpt-4",
        "tokens_used": 4200,
        "cost": 0.126,
    },
    {
        "workflow_id": "wf_003",
        "workflow_name": "Action Item Extraction",
        "execution_time": 28.5,
        "success": True,
        "prompt_id": 2,
        "model_used": "claude-3-opus",
        "tokens_used": 2100,
        "cost": 0.084,
    },
    {
        "workflow_id": "wf_004",
        "workflow_name": "Evidence Classification",
        "execution_time": 55.3,
        "success": False,
        "prompt_id": 3,
        "model_used": "gpt-4-vision",
        "tokens_used": 1800,
        "cost": 0.072,
        "error_message": "Image processing timeout",
    },
    {
        "workflow_id": "wf_005",
        "workflow_name": "Legal Research Summary",
        "execution_time": 89.7,
        "success": True,
        "prompt_id": 5,
        "model_used": "claude-3-opus",
        "tokens_used": 5500,
        "cost": 0.220,
    },
]

SEED_TABLES = [
    (Prompt, DEMO_PROMPTS),
    (ContextTemplate, DEMO_CONTEXT_TEMPLATES),
    (WorkflowMetric, DEMO_WORKFLOW_METRICS),
]


async def _count(session: AsyncSession, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def _seed_table(session: AsyncSession, model, rows: list[dict]) -> int:
    """Insert ``rows`` only when the table is empty. Returns rows added."""
    table = model.__tablename__
    existing = await _count(session, model)
    if existing:
        logger.info("%s already contains %d entries, skipping", table, existing)
        return 0

    session.add_all([model(**row) for row in rows])
    await session.flush()
    logger.info("Seeded %d rows into %s", len(rows), table)
    return len(rows)


async def seed_all_defaults(session: AsyncSession) -> dict[str, int]:
    """Idempotent entry point: seed all demo data.

    All inserts share one commit, so the returned summary is only produced
    once every row is durable.
    """
    logger.info("Checking seed defaults...")
    inserted = {}
    for model, rows in SEED_TABLES:
        inserted[model.__tablename__] = await _seed_table(session, model, rows)
    await session.commit()

    for model, _ in SEED_TABLES:
        logger.info("  - %s: %d entries", model.__tablename__, await _count(session, model))
    logger.info("Seed defaults check complete")
    return inserted


async def run(database_url: str, prune_days: Optional[int] = None) -> dict[str, int]:
    """Create the schema, seed it, optionally prune old metrics, then close the store."""
    async with Database(database_url) as database:
        await database.init_schema()
        async with database.session() as session:
            summary = await seed_all_defaults(session)
            if prune_days:
                summary["pruned_workflow_metrics"] = await prune_metrics(session, prune_days)
    return summary


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the metrics database with demo data")
    parser.add_argument(
        "--database-url",
        default=settings.DATABASE_URL,
        help="SQLAlchemy async URL (default: DATABASE_URL setting)",
    )
    parser.add_argument(
        "--prune-days",
        type=int,
        default=settings.METRICS_RETENTION_DAYS or None,
        help="Delete workflow metrics older than this many days",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run(args.database_url, args.prune_days))
    except Exception:
        logger.exception("Database initialization failed")
        return 1
    logger.info("Database initialization complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
