"""Document analysis collaborators.

An analyzer takes raw document bytes plus an optional type hint and returns a
``DocumentAnalysis``. Failures cross this boundary only as
``DocumentAnalysisError`` carrying an explicit ``kind``; the HTTP layer maps
the kind to a status code with a dictionary lookup.
"""
import asyncio
import enum
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError

from app.config import Settings
from app.schemas.document import DocumentAnalysis

logger = logging.getLogger(__name__)


class AnalysisErrorKind(str, enum.Enum):
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    INVALID_INPUT = "invalid_input"
    INTERNAL = "internal"


ERROR_STATUS_CODES = {
    AnalysisErrorKind.RATE_LIMITED: 429,
    AnalysisErrorKind.UNAUTHORIZED: 401,
    AnalysisErrorKind.INVALID_INPUT: 400,
    AnalysisErrorKind.INTERNAL: 500,
}


class DocumentAnalysisError(Exception):
    """Raised by analyzers; ``kind`` selects the HTTP status."""

    def __init__(self, kind: AnalysisErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self.kind]


class DocumentAnalyzer(ABC):
    """Abstract base class for document analyzers."""

    name: str = "base"
    model_name: str = ""

    @abstractmethod
    async def analyze(
        self, content: bytes, file_name: str, document_type: Optional[str] = None
    ) -> DocumentAnalysis:
        pass


# ═══════════════════════════════════════════════════════════════════════════════
# DEMO ANALYZER
# ═══════════════════════════════════════════════════════════════════════════════

DEMO_ANALYSES = {
    "nda": {
        "extraction": {
            "document_type": "Non-Disclosure Agreement",
            "confidence": 0.97,
            "key_terms": [
                {"term": "Mutual confidentiality obligations", "context": "Both parties must protect shared information", "importance": "high", "location": "Section 3"},
                {"term": "Delaware jurisdiction", "context": "Legal disputes governed by Delaware law", "importance": "medium", "location": "Section 11"},
                {"term": "3-year confidentiality period", "context": "Information remains confidential for 3 years", "importance": "high", "location": "Section 3.2"},
            ],
            "dates": [
                {"date": "January 15, 2025", "type": "Effective Date", "description": "Agreement becomes effective", "is_critical": True},
                {"date": "January 15, 2028", "type": "Expiration", "description": "Confidentiality obligations end", "is_critical": True},
            ],
            "parties": [
                {"name": "TechCo Inc.", "role": "Disclosing Party", "obligations": ["Protect confidential information", "Provide accurate information"]},
                {"name": "DataFlow Systems LLC", "role": "Receiving Party", "obligations": ["Maintain confidentiality", "Return information upon request"]},
            ],
            "obligations": [
                {"party": "Both Parties", "description": "Maintain strict confidentiality", "status": "active"},
                {"party": "Receiving Party", "description": "Return or destroy confidential information upon termination", "status": "active"},
            ],
        },
        "analysis": {
            "summary": "Mutual NDA between TechCo Inc. and DataFlow Systems LLC with standard confidentiality provisions and Delaware jurisdiction.",
            "key_findings": [
                "Mutual obligations properly balanced between parties",
                "Standard confidentiality period of 3 years",
                "Delaware jurisdiction favorable for enforcement",
                "No liquidated damages provision specified",
            ],
            "recommendations": [
                "Consider AI/ML specific provisions for technology companies",
                "Add residual knowledge clause for developers",
                "Include liquidated damages clause ($50K-$100K range)",
                "Clarify remote work and data access protocols",
            ],
            "complexity": "medium",
            "estimated_review_time": 2.5,
        },
        "risks": [
            {"category": "Legal", "severity": "medium", "description": "Confidentiality period may be insufficient for AI technology", "mitigation": "Extend period to 5-7 years for AI/ML models", "probability": 65},
            {"category": "Operational", "severity": "low", "description": "Standard termination provisions may need enhancement", "mitigation": "Add specific termination procedures", "probability": 30},
        ],
        "action_items": [
            {"id": "1", "title": "Review AI/ML provisions", "description": "Add specific clause for training data and algorithm protection", "priority": "high", "estimated_time": 1.5},
            {"id": "2", "title": "Add liquidated damages", "description": "Include monetary penalties for breach", "priority": "medium", "estimated_time": 1.0},
        ],
        "time_saved": 7.8,
        "cost_saved": 487,
    },
    "deposition": {
        "extraction": {
            "document_type": "Deposition Transcript",
            "confidence": 0.94,
            "key_terms": [
                {"term": "Expert witness credentials", "context": "Dr. Williams PhD MIT, 22 years experience", "importance": "high", "location": "Page 3"},
                {"term": "Three design flaws", "context": "Tensile strength, weld penetration, safety mechanism", "importance": "high", "location": "Page 23"},
                {"term": "127 QC violations", "context": "Below-spec products approved with deviations", "importance": "high", "location": "Page 24"},
            ],
            "dates": [
                {"date": "December 10, 2024", "type": "Deposition Date", "description": "Expert testimony given", "is_critical": True},
                {"date": "December 20, 2024", "type": "Signature Date", "description": "Witness signed transcript", "is_critical": False},
            ],
            "parties": [
                {"name": "Dr. Sarah Williams", "role": "Expert Witness", "obligations": ["Provide truthful testimony", "Review transcript for accuracy"]},
                {"name": "Jonathan Williams", "role": "Plaintiff", "obligations": ["Pursue case diligently"]},
                {"name": "Acme Corporation", "role": "Defendant", "obligations": ["Respond to discovery requests"]},
            ],
        },
        "analysis": {
            "summary": "Expert witness deposition in Williams v. Acme product liability case with strong technical testimony identifying multiple design flaws.",
            "key_findings": [
                "Expert credentials are impeccable - MIT PhD and professor",
                "Three independent design flaws create strong causation theory",
                "ASTM testing standards properly followed",
                "127 quality control violations show pattern of negligence",
                "Expert maintained composure during cross-examination",
            ],
            "recommendations": [
                "File Daubert motion to establish methodology admissibility",
                "Create visual demonstrative showing three-failure cascade",
                "Emphasize 127 QC violations for punitive damages claim",
                "Prepare redirect to address 75% plaintiff bias concern",
                "Highlight MIT credentials and 22 years experience",
            ],
            "complexity": "high",
            "estimated_review_time": 8.5,
        },
        "risks": [
            {"category": "Legal", "severity": "high", "description": "QC violations pattern suggests willful negligence - punitive damages likely", "mitigation": "Prepare strong damages argument", "probability": 85},
            {"category": "Reputational", "severity": "medium", "description": "Bias challenge based on 75% plaintiff work history", "mitigation": "Prepare redirect on objectivity", "probability": 60},
        ],
        "action_items": [
            {"id": "1", "title": "File Daubert motion", "description": "Establish methodology admissibility before trial", "priority": "urgent", "estimated_time": 4.0},
            {"id": "2", "title": "Create visual aids", "description": "Develop demonstratives for three-failure theory", "priority": "high", "estimated_time": 3.0},
        ],
        "time_saved": 14.5,
        "cost_saved": 2175,
    },
    "msa": {
        "extraction": {
            "document_type": "Master Services Agreement",
            "confidence": 0.96,
            "key_terms": [
                {"term": "$2,400,000 annual commitment", "context": "$200,000 monthly service fee", "importance": "high", "location": "Section 8.1"},
                {"term": "99.9% uptime SLA", "context": "Monthly availability requirement", "importance": "high", "location": "Section 5.1"},
                {"term": "3-year initial term", "context": "Contract duration with auto-renewal", "importance": "high", "location": "Section 9.1"},
            ],
            "dates": [
                {"date": "February 1, 2025", "type": "Effective Date", "description": "Services commence", "is_critical": True},
                {"date": "February 1, 2028", "type": "Initial Term End", "description": "First renewal decision point", "is_critical": True},
            ],
            "parties": [
                {"name": "Global Solutions Inc.", "role": "Service Provider", "obligations": ["Deliver services per SLA", "Maintain security standards"]},
                {"name": "Enterprise Partners LLC", "role": "Client", "obligations": ["Pay fees on time", "Provide necessary access"]},
            ],
            "obligations": [
                {"party": "Provider", "description": "Maintain 99.9% uptime", "deadline": "Monthly", "status": "active"},
                {"party": "Client", "description": "Pay monthly fees within 30 days", "deadline": "Monthly", "status": "active"},
            ],
        },
        "analysis": {
            "summary": "High-value enterprise services agreement with aggressive SLA requirements and significant financial commitments.",
            "key_findings": [
                "$2.4M annual commitment provides significant leverage for negotiation",
                "SOC 2 Type II and $5M cyber insurance show strong security posture",
                "99.9% uptime SLA extremely difficult to maintain consistently",
                "3-year initial term creates $7.2M total commitment",
                "Early termination could cost up to $3.6M in penalties",
            ],
            "recommendations": [
                "Negotiate Initial Term down to 1-2 years",
                "Reduce termination notice to 90 days maximum",
                "Add termination right for 3+ months of SLA failures",
                "Remove 3% floor on increases - tie to CPI only",
                "Negotiate 99.5% SLA (more realistic)",
            ],
            "complexity": "high",
            "estimated_review_time": 6.5,
        },
        "risks": [
            {"category": "Financial", "severity": "high", "description": "Total exposure: $7.2M over initial term with limited exit rights", "mitigation": "Negotiate shorter initial term", "probability": 90},
            {"category": "Operational", "severity": "high", "description": "99.9% SLA extremely difficult to maintain consistently", "mitigation": "Request realistic SLA targets", "probability": 75},
        ],
        "action_items": [
            {"id": "1", "title": "Negotiate contract terms", "description": "Reduce initial term and improve exit provisions", "priority": "urgent", "estimated_time": 8.0},
            {"id": "2", "title": "Review SLA feasibility", "description": "Assess whether 99.9% uptime is achievable", "priority": "high", "estimated_time": 2.0},
        ],
        "time_saved": 12.5,
        "cost_saved": 3125,
    },
    "discovery": {
        "extraction": {
            "document_type": "Discovery Request",
            "confidence": 0.93,
            "key_terms": [
                {"term": "73 document categories", "context": "Total number of production requests", "importance": "high", "location": "Summary"},
                {"term": "2.4 million pages estimated", "context": "Expected document volume", "importance": "high", "location": "Certificate"},
                {"term": "5-year lookback period", "context": "January 1, 2020 to present", "importance": "medium", "location": "Definitions"},
            ],
            "dates": [
                {"date": "March 1, 2025", "type": "Service Date", "description": "Discovery requests served", "is_critical": True},
                {"date": "March 31, 2025", "type": "Response Due", "description": "30-day response deadline", "is_critical": True},
            ],
            "parties": [
                {"name": "Pinnacle Holdings, Inc.", "role": "Requesting Party", "obligations": ["Serve proper discovery requests"]},
                {"name": "Apex Corporation", "role": "Responding Party", "obligations": ["Produce responsive documents", "Provide privilege log"]},
            ],
            "obligations": [
                {"party": "Apex Corporation", "description": "Produce all responsive documents", "deadline": "March 31, 2025", "status": "pending"},
                {"party": "Apex Corporation", "description": "Provide document-by-document privilege log", "deadline": "March 31, 2025", "status": "pending"},
            ],
        },
        "analysis": {
            "summary": "Comprehensive discovery requests in merger litigation with extraordinarily broad scope targeting 2.4 million documents over 5-year period.",
            "key_findings": [
                "Antitrust focus indicates DOJ/FTC investigation parallel to litigation",
                "Valuation documents (requests 12-27) highly material to damages",
                "Integration planning documents may show anti-competitive intent",
                "5-year lookback period likely overbroad for merger case",
                "Personal device searches raise significant privacy concerns",
            ],
            "recommendations": [
                "File emergency protective order and motion to quash/limit",
                "Propose phased discovery (start with 5 key custodians)",
                "Challenge 5-year timeframe as disproportionate",
                "Negotiate focused search terms and date ranges",
                "Request cost-shifting for overbroad requests",
            ],
            "complexity": "high",
            "estimated_review_time": 25.0,
        },
        "risks": [
            {"category": "Financial", "severity": "high", "description": "2.4M document burden disproportionate to case value", "mitigation": "File motion for protective order", "probability": 95},
            {"category": "Operational", "severity": "high", "description": "Review costs could exceed $875,000 with privilege review", "mitigation": "Negotiate cost-shifting", "probability": 85},
        ],
        "action_items": [
            {"id": "1", "title": "File protective motion", "description": "Emergency motion to limit scope of discovery", "priority": "urgent", "estimated_time": 12.0},
            {"id": "2", "title": "Negotiate ESI protocol", "description": "Establish search terms and review procedures", "priority": "high", "estimated_time": 6.0},
        ],
        "time_saved": 32,
        "cost_saved": 9600,
    },
}

# Checked in order; first hit on the hint or the file name wins
_DEMO_MATCHERS = [
    ("nda", ("nda",), ("nda",)),
    ("deposition", ("deposition",), ("deposition", "williams")),
    ("msa", ("msa", "service"), ("msa", "service")),
    ("discovery", ("discovery",), ("discovery", "merger")),
]


def pick_demo_analysis(document_type: Optional[str], file_name: Optional[str]) -> str:
    """Choose a canned analysis key from the type hint or file name. Defaults to nda."""
    hint = (document_type or "").lower()
    name = (file_name or "").lower()
    for key, hint_words, name_words in _DEMO_MATCHERS:
        if any(w in hint for w in hint_words) or any(w in name for w in name_words):
            return key
    return "nda"


class DemoDocumentAnalyzer(DocumentAnalyzer):
    """Returns canned analyses; no external calls."""

    name = "demo"
    model_name = "demo"

    def __init__(self, delay_seconds: float = 0.0):
        self.delay_seconds = delay_seconds

    async def analyze(self, content, file_name, document_type=None):
        if not content:
            raise DocumentAnalysisError(AnalysisErrorKind.INVALID_INPUT, "Uploaded file is empty")
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        key = pick_demo_analysis(document_type, file_name)
        return DocumentAnalysis.model_validate(DEMO_ANALYSES[key])


# ═══════════════════════════════════════════════════════════════════════════════
# OPENAI ANALYZER
# ═══════════════════════════════════════════════════════════════════════════════

SYSTEM_PROMPT = """You are a legal document analyst. Read the document and return a single JSON object with these keys:
- extraction: {document_type, confidence (0-1), key_terms [{term, context, importance (low|medium|high), location}], dates [{date, type, description, is_critical}], parties [{name, role, obligations []}], obligations [{party, description, deadline, status (active|pending|completed)}]}
- analysis: {summary, key_findings [], recommendations [], complexity (low|medium|high), estimated_review_time (hours a lawyer would need)}
- risks: [{category, severity (low|medium|high|critical), description, mitigation, probability (0-100)}]
- action_items: [{id, title, description, priority (low|medium|high|urgent), status (pending), estimated_time}]
Only report what the document supports. Do not invent parties or dates."""

# Reviewer hourly rates (USD) by document complexity
HOURLY_RATES = {"low": 85, "medium": 175, "high": 350}

MAX_DOCUMENT_CHARS = 60_000


def estimate_savings(analysis: DocumentAnalysis, processing_seconds: float) -> DocumentAnalysis:
    """Fill time_saved/cost_saved from the estimated manual review time."""
    hours_saved = max(0.0, analysis.analysis.estimated_review_time - processing_seconds / 3600)
    rate = HOURLY_RATES.get(analysis.analysis.complexity, HOURLY_RATES["medium"])
    return analysis.model_copy(update={
        "time_saved": round(hours_saved, 2),
        "cost_saved": float(round(hours_saved * rate)),
    })


class OpenAIDocumentAnalyzer(DocumentAnalyzer):
    """Analyzer backed by the OpenAI chat completions API in JSON mode."""

    name = "openai"

    def __init__(self, api_key: str, model_name: str, temperature: float = 0.1, timeout: float = 90.0):
        if not api_key:
            raise ValueError("OPENAI_API_KEY is required for the openai analyzer")
        from openai import OpenAI
        self.client = OpenAI(api_key=api_key)
        self.model_name = model_name
        self.temperature = temperature
        self.timeout = timeout

    def _sync_analyze(self, text: str, document_type: Optional[str]) -> str:
        hint = f"Document type hint: {document_type}\n\n" if document_type else ""
        response = self.client.chat.completions.create(
            model=self.model_name,
            temperature=self.temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"{hint}DOCUMENT:\n{text}"},
            ],
        )
        return response.choices[0].message.content or ""

    async def analyze(self, content, file_name, document_type=None):
        text = content.decode("utf-8", errors="replace").strip()
        if not text:
            raise DocumentAnalysisError(AnalysisErrorKind.INVALID_INPUT, "Uploaded file contains no text")
        text = text[:MAX_DOCUMENT_CHARS]

        started = time.monotonic()
        try:
            raw = await asyncio.wait_for(
                asyncio.to_thread(self._sync_analyze, text, document_type),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise DocumentAnalysisError(
                AnalysisErrorKind.INTERNAL, f"Analysis timed out after {self.timeout}s"
            )
        except Exception as e:
            raise self._classify(e) from e

        try:
            analysis = DocumentAnalysis.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Unparseable analysis from %s: %s", self.model_name, e)
            raise DocumentAnalysisError(
                AnalysisErrorKind.INTERNAL, "Analysis service returned an invalid result"
            ) from e
        return estimate_savings(analysis, time.monotonic() - started)

    @staticmethod
    def _classify(exc: Exception) -> DocumentAnalysisError:
        """Translate an SDK exception into a typed analysis error."""
        import openai

        if isinstance(exc, openai.RateLimitError):
            kind = AnalysisErrorKind.RATE_LIMITED
        elif isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
            kind = AnalysisErrorKind.UNAUTHORIZED
        elif isinstance(exc, (openai.BadRequestError, openai.UnprocessableEntityError)):
            kind = AnalysisErrorKind.INVALID_INPUT
        else:
            kind = AnalysisErrorKind.INTERNAL
        return DocumentAnalysisError(kind, str(exc))


def create_document_analyzer(settings: Settings) -> DocumentAnalyzer:
    """Build the analyzer selected by DOCUMENT_ANALYZER."""
    if settings.DOCUMENT_ANALYZER == "openai":
        return OpenAIDocumentAnalyzer(
            api_key=settings.OPENAI_API_KEY,
            model_name=settings.OPENAI_MODEL,
            temperature=settings.ANALYSIS_TEMPERATURE,
        )
    if settings.DOCUMENT_ANALYZER != "demo":
        raise ValueError(f"Unknown DOCUMENT_ANALYZER: {settings.DOCUMENT_ANALYZER}")
    return DemoDocumentAnalyzer()
