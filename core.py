# Version: 3.0
import os
import glob
import re
import enum
import uuid
import logging
import logging.handlers
import importlib.util
from dataclasses import dataclass, field
from datetime import datetime, date
import sys

logger = logging.getLogger(__name__)

_PDFPLUMBER_CACHE = None


# ----------------------------
# CONFIG (edit these as needed)
# ----------------------------

PARSERS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "Parsers")
LOGS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "Logs")

MAX_PDF_PAGES = 50
MIN_TEXT_LENGTH = 50
CONFIDENCE_THRESHOLD = 0.5
# Rows a parse needs before its confidence can clear the threshold.
MIN_CONFIDENT_ROWS = 2
GENERIC_MIN_CONFIDENT_ROWS = 3
HEADER_SCAN_CHARS = 1500
MIN_LINE_LENGTH = 20
TEXT_SAMPLE_CHARS = 200

CATEGORIES = [
    "Income",
    "Groceries",
    "Eating out",
    "Transport",
    "Shopping",
    "Bills & Utilities",
    "Tax",
    "Insurance & Professional",
    "Business Services",
    "Health & Wellbeing",
    "Subscriptions",
    "Transfers",
    "Other",
]

# Ordered: first rule whose keywords are all present wins.
BANK_RULES = [
    (("Santander",), "Santander"),
    (("Chase", "Account number"), "Chase"),
    (("Monzo",), "Monzo"),
    (("monzo.com",), "Monzo"),
    (("Lloyds",), "Lloyds"),
    (("Halifax",), "Halifax"),
]

# Barclays personal and business letterheads; any one is enough.
BARCLAYS_MARKERS = [
    "barclays",
    "barclays bank uk plc",
    "barclays.co.uk",
    "bukbgb22",
    "your business current account",
]

# Bank label -> parser module under PARSERS_DIR
PARSER_MODULES = {
    "Santander": "santander",
    "Chase": "chase",
    "Monzo": "monzo",
    "Lloyds": "lloyds",
    "Halifax": "lloyds",
    "Barclays": "barclays",
}

# Parsers that need the whitespace-collapsed text instead of segmented lines.
BLOB_PARSERS = {"barclays"}

GENERIC_PARSER = "generic"


@dataclass(frozen=True)
class PipelineConfig:
    max_pdf_pages: int = MAX_PDF_PAGES
    min_text_length: int = MIN_TEXT_LENGTH
    confidence_threshold: float = CONFIDENCE_THRESHOLD
    parsers_dir: str = PARSERS_DIR

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Read overrides from STATEMENT_MAX_PDF_PAGES / STATEMENT_CONFIDENCE_THRESHOLD."""
        max_pages = os.environ.get("STATEMENT_MAX_PDF_PAGES", "").strip()
        threshold = os.environ.get("STATEMENT_CONFIDENCE_THRESHOLD", "").strip()
        return cls(
            max_pdf_pages=int(max_pages) if max_pages else MAX_PDF_PAGES,
            confidence_threshold=float(threshold) if threshold else CONFIDENCE_THRESHOLD,
        )


# ----------------------------
# Utilities
# ----------------------------

def ensure_folder(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def setup_logging(level: str = "INFO", log_dir: str | None = LOGS_DIR) -> logging.Logger:
    """Console + rotating file logging for command-line runs."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_dir:
        ensure_folder(log_dir)
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, "statement_parser.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root


def _require_pdfplumber():
    global _PDFPLUMBER_CACHE
    if _PDFPLUMBER_CACHE is not None:
        return _PDFPLUMBER_CACHE
    try:
        import pdfplumber
    except ImportError as e:
        raise RuntimeError(
            "pdfplumber is required for PDF text extraction.\n\n"
            "Install it with:\n"
            "  python -m pip install pdfplumber\n\n"
            f"Original error: {e}"
        ) from e
    _PDFPLUMBER_CACHE = pdfplumber
    return pdfplumber


def _page_text(page) -> str:
    try:
        txt = page.extract_text() or ""
    except Exception:
        txt = ""

    if not txt:
        try:
            words = page.extract_words() or []
            if words:
                txt = " ".join(w.get("text", "") for w in words if w.get("text"))
        except Exception:
            pass

    if not txt:
        try:
            chars = getattr(page, "chars", None) or []
            if chars:
                txt = "".join(c.get("text", "") for c in chars if c.get("text"))
        except Exception:
            pass

    return txt


def extract_pdf_text(pdf_path: str) -> tuple[str, int]:
    """Return (full text, page count) for a text-based PDF."""
    if not os.path.isfile(pdf_path):
        raise FileNotFoundError(f"Statement PDF not found: {pdf_path}")
    pdfplumber = _require_pdfplumber()
    with pdfplumber.open(pdf_path) as pdf:
        texts = [_page_text(p) for p in pdf.pages]
        return "\n".join(texts), len(pdf.pages)


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


_MONTH_ALT = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\b"
)

# A line break goes in front of each of these.
_LINE_DATE_RE = re.compile(
    r"(?<![\d/-])("
    r"\d{1,2}(?:st|nd|rd|th)?\s" + _MONTH_ALT + r"(?:\s\d{2,4}\b)?"
    r"|\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}/\d{1,2}/\d{2,4}"
    r")(?![\d/])"
)


def split_statement_lines(text: str, min_length: int = MIN_LINE_LENGTH) -> list[str]:
    """Segment statement text into candidate transaction lines.

    Text extracted from a PDF often arrives as one long run, so a break is
    inserted before every date-like token and only lines longer than
    `min_length` characters are kept.
    """
    cleaned = collapse_whitespace(text)
    cleaned = _LINE_DATE_RE.sub(lambda m: "\n" + m.group(1), cleaned).strip()
    return [ln.strip() for ln in cleaned.split("\n") if len(ln.strip()) > min_length]


# ----------------------------
# Bank & year detection
# ----------------------------

_YEAR = r"(202\d)"
_YEAR_PATTERNS = [
    # March 2024 / Mar 2024
    re.compile(r"\b" + _MONTH_ALT + r"\.?\s+" + _YEAR + r"\b", re.IGNORECASE),
    # 15/03/2024, 15-03-2024, 15.03.2024
    re.compile(r"\b\d{1,2}[/.-]\d{1,2}[/.-]" + _YEAR + r"\b"),
    # Statement period ... 2024 / From ... 2024
    re.compile(r"\b(?:statement|period|from)\b[^\n]{0,80}?\b" + _YEAR + r"\b", re.IGNORECASE),
    re.compile(r"\b" + _YEAR + r"\b"),
]


def detect_year(text: str, today: date | None = None) -> int:
    """Infer the statement year from its header.

    Only the first HEADER_SCAN_CHARS characters are searched. Specific
    patterns are tried before a bare year so that account numbers and
    reference codes do not win. Falls back to the current year.
    """
    header = (text or "")[:HEADER_SCAN_CHARS]
    for pattern in _YEAR_PATTERNS:
        m = pattern.search(header)
        if m:
            return int(m.group(1))
    return (today or date.today()).year


def detect_bank_type(text: str) -> str | None:
    """Return the bank label for a statement, or None when unrecognised."""
    t = text or ""
    for keywords, bank in BANK_RULES:
        if all(k in t for k in keywords):
            return bank

    low = t.lower()
    if any(marker in low for marker in BARCLAYS_MARKERS):
        return "Barclays"

    return None


_BANK_LABEL_RE = re.compile(r"\bBank(?:\s+name)?\s*:\s*([A-Z][A-Za-z&'.-]*(?:[ ][A-Z][A-Za-z&'.-]*){0,3})")


def find_bank_label(text: str) -> str | None:
    """Find an explicit 'Bank: <name>' style label in the statement header."""
    header = (text or "")[:HEADER_SCAN_CHARS]
    m = _BANK_LABEL_RE.search(header)
    if not m:
        return None
    name = m.group(1).strip(" .-")
    return name or None


# ----------------------------
# Parser loading
# ----------------------------

def normalize_bank_name_for_module(bank: str) -> str:
    normalized = bank.strip()
    if normalized in PARSER_MODULES:
        return PARSER_MODULES[normalized]
    return normalized.lower()


def load_parser_module(bank: str, parsers_dir: str = PARSERS_DIR):
    bank_module_name = normalize_bank_name_for_module(bank)

    parser_path = os.path.join(parsers_dir, f"{bank_module_name}.py")

    if not os.path.exists(parser_path):
        pattern = os.path.join(parsers_dir, f"{bank_module_name}-*.py")
        matches = sorted(glob.glob(pattern))
        if matches:
            parser_path = matches[-1]

    if not os.path.exists(parser_path):
        raise FileNotFoundError(
            f"No parser found for bank '{bank}'. Expected either:\n"
            f"  - {os.path.join(parsers_dir, bank_module_name + '.py')}\n"
            f"  - {os.path.join(parsers_dir, bank_module_name + '-<version>.py')}"
        )

    module_key = os.path.splitext(os.path.basename(parser_path))[0]

    spec = importlib.util.spec_from_file_location(f"parsers.{module_key}", parser_path)
    if spec is None or spec.loader is None:
        raise RuntimeError(f"Unable to load parser module from {parser_path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    if not hasattr(module, "extract_transactions"):
        raise AttributeError(
            f"Parser '{parser_path}' does not define extract_transactions(lines, year)."
        )

    return module


# ----------------------------
# Errors
# ----------------------------

class ErrorKind(enum.Enum):
    PDF_TOO_LARGE = "PDF_TOO_LARGE"
    PDF_EMPTY = "PDF_EMPTY"
    NO_TRANSACTIONS_FOUND = "NO_TRANSACTIONS_FOUND"
    UNSUPPORTED_BANK = "UNSUPPORTED_BANK"
    BANK_NOT_RECOGNIZED = "BANK_NOT_RECOGNIZED"
    GENERIC_PARSER_FAILED = "GENERIC_PARSER_FAILED"


class ParsingError(Exception):
    """A statement could not be turned into a trustworthy ledger.

    `kind` says what went wrong; `details` carries what a UI needs to explain
    it (page counts, a text sample, the detected bank) without re-reading the
    statement.
    """

    def __init__(self, kind: ErrorKind, details: dict | None = None):
        self.kind = kind
        self.details = dict(details or {})
        super().__init__(self.user_message())

    def user_message(self) -> str:
        d = self.details
        if self.kind is ErrorKind.PDF_TOO_LARGE:
            return (
                f"This PDF has {d.get('pageCount')} pages; statements over "
                f"{d.get('maxPages')} pages are not supported. Try splitting it by month."
            )
        if self.kind is ErrorKind.PDF_EMPTY:
            return (
                "No readable text was found in this PDF. It may be a scanned image; "
                "download a text-based statement from online banking instead."
            )
        if self.kind is ErrorKind.NO_TRANSACTIONS_FOUND:
            return (
                f"This looks like a {d.get('bank')} statement, but no transactions could be read from it."
            )
        if self.kind is ErrorKind.UNSUPPORTED_BANK:
            return f"Statements from {d.get('bankName')} are not supported yet."
        if self.kind is ErrorKind.BANK_NOT_RECOGNIZED:
            return (
                "The bank could not be recognised. Supported banks: "
                + ", ".join(d.get("supportedBanks") or [])
                + "."
            )
        if self.kind is ErrorKind.GENERIC_PARSER_FAILED:
            return (
                f"Transactions were found but the result is unreliable "
                f"(confidence {d.get('confidence', 0):.2f}). Please check the statement format."
            )
        return self.kind.value


def _text_sample(text: str) -> str:
    return collapse_whitespace(text)[:TEXT_SAMPLE_CHARS]


def supported_banks() -> list[str]:
    banks = [bank for _, bank in BANK_RULES] + ["Barclays"]
    return list(dict.fromkeys(banks))


def check_document(text: str, page_count: int, config: PipelineConfig | None = None) -> None:
    """Reject oversized and text-less documents before any parsing."""
    config = config or PipelineConfig()
    if page_count > config.max_pdf_pages:
        raise ParsingError(
            ErrorKind.PDF_TOO_LARGE,
            {"pageCount": page_count, "maxPages": config.max_pdf_pages},
        )

    stripped = (text or "").strip()
    if len(stripped) < config.min_text_length:
        raise ParsingError(
            ErrorKind.PDF_EMPTY,
            {"pageCount": page_count, "textLength": len(stripped), "textSample": _text_sample(stripped)},
        )


def classify_empty_result(text: str, bank: str | None) -> ParsingError:
    """Pick the error for a run where every strategy found nothing."""
    if bank:
        return ParsingError(
            ErrorKind.NO_TRANSACTIONS_FOUND,
            {"bank": bank, "textSample": _text_sample(text)},
        )

    label = find_bank_label(text)
    if label:
        return ParsingError(
            ErrorKind.UNSUPPORTED_BANK,
            {"bankName": label, "supportedBanks": supported_banks()},
        )

    return ParsingError(
        ErrorKind.BANK_NOT_RECOGNIZED,
        {"textSample": _text_sample(text), "supportedBanks": supported_banks()},
    )


# ----------------------------
# Validation & confidence
# ----------------------------

def _as_date(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def validate_transactions(candidates: list[dict]) -> list[dict]:
    """Drop or repair malformed raw candidates.

    Keeps statement order. A candidate survives when it has a real calendar
    date, a positive finite amount, a non-empty description and a known type.
    Rows repeated with the same running balance are extraction duplicates and
    are dropped; repeats without a balance are kept, since two identical card
    payments on one day are legitimate.
    """
    cleaned: list[dict] = []
    seen: set = set()

    for cand in candidates or []:
        if not isinstance(cand, dict):
            continue

        d = _as_date(cand.get("Date"))
        if d is None:
            continue

        try:
            amount = float(cand.get("Amount"))
        except (TypeError, ValueError):
            continue
        if amount != amount or amount in (float("inf"), float("-inf")):
            continue
        amount = round(abs(amount), 2)
        if amount <= 0:
            continue

        description = collapse_whitespace(str(cand.get("Description") or ""))
        if not description:
            continue

        txn_type = str(cand.get("Type") or "").strip().lower()
        if txn_type not in ("income", "expense"):
            continue

        balance = cand.get("Balance")
        if balance is not None:
            key = (d, description.upper(), amount, txn_type, round(float(balance), 2))
            if key in seen:
                continue
            seen.add(key)

        cleaned.append(
            {
                "Date": d,
                "Description": description,
                "Amount": amount,
                "Type": txn_type,
                "Balance": balance,
            }
        )

    return cleaned


def calculate_confidence(
    cleaned: list[dict],
    candidate_count: int | None = None,
    min_rows: int = MIN_CONFIDENT_ROWS,
) -> float:
    """Score how far a parse run can be trusted, in [0, 1].

    score = 0.5 * volume + 0.5 * quality * support

      - volume: validated rows, saturating at 20
      - quality: date order (0.4), plausible amounts (0.3), yield (0.3)
          - date order: share of adjacent rows in statement order, either
            direction, halved when the dates span more than 400 days
          - plausible amounts: share between 0.01 and 100,000
          - yield: validated rows / raw candidates
      - support: rows / min_rows, capped at 1

    Below `min_rows` rows the score stays under 0.5 however clean they look,
    so a stray date and amount in a letter is not a ledger. No rows scores 0.
    """
    n = len(cleaned or [])
    if n == 0:
        return 0.0

    volume = min(n, 20) / 20
    support = min(n, max(min_rows, 1)) / max(min_rows, 1)

    dates = [_as_date(t.get("Date")) for t in cleaned]
    dates = [d for d in dates if d is not None]
    if len(dates) < 2:
        order = 1.0
    else:
        pairs = len(dates) - 1
        ascending = sum(1 for a, b in zip(dates, dates[1:]) if b >= a)
        descending = sum(1 for a, b in zip(dates, dates[1:]) if b <= a)
        order = max(ascending, descending) / pairs
        if (max(dates) - min(dates)).days > 400:
            order *= 0.5

    plausible = sum(1 for t in cleaned if 0.01 <= float(t.get("Amount") or 0) <= 100000) / n

    raw = candidate_count if candidate_count and candidate_count >= n else n
    yield_ratio = n / raw

    quality = 0.4 * order + 0.3 * plausible + 0.3 * yield_ratio
    score = 0.5 * volume + 0.5 * quality * support
    return round(min(max(score, 0.0), 1.0), 4)


# ----------------------------
# Categorisation
# ----------------------------

# Ordered: the first category with a matching keyword wins.
CATEGORY_RULES = [
    ("Bills & Utilities", [
        "british gas", "octopus energy", "edf energy", "e.on", "eon next", "ovo energy",
        "bulb energy", "scottish power", "thames water", "severn trent", "anglian water",
        "united utilities", "yorkshire water", "council tax", "virgin media", "bt group",
        "sky digital", "talktalk", "vodafone", "ee limited", "giffgaff", "tv licen",
        "broadband", "electricity", "water rates", "rent payment", "letting agent",
    ]),
    ("Tax", [
        "hmrc", "self assessment", "vat payment", "corporation tax", "dvla",
    ]),
    ("Insurance & Professional", [
        "insurance", "aviva", "admiral", "direct line", "legal & general", "hiscox",
        "lv=", "accountant", "accountancy", "solicitor",
    ]),
    ("Business Services", [
        "google workspace", "gsuite", "microsoft 365", "xero", "quickbooks", "freeagent",
        "companies house", "mailchimp", "godaddy", "squarespace", "shopify", "slack",
        "zoom.us", "stripe", "wix.com", "adobe",
    ]),
    ("Groceries", [
        "tesco", "sainsbury", "asda", "morrisons", "aldi", "lidl", "waitrose", "co-op",
        "coop", "iceland", "ocado", "m&s simply food", "marks & spencer food",
    ]),
    ("Eating out", [
        "pret", "starbucks", "costa", "caffe nero", "greggs", "mcdonald", "kfc",
        "nando", "deliveroo", "uber eats", "just eat", "burger king", "wagamama",
        "pizza", "restaurant", "cafe", "coffee",
    ]),
    ("Shopping", [
        "amazon.co.uk", "amzn mktp", "amazon marketplace", "argos", "ebay", "john lewis",
        "primark", "asos", "next retail", "h&m", "zara", "ikea", "currys", "tk maxx",
        "etsy", "apple store",
    ]),
    ("Transport", [
        "tfl travel", "tfl.gov", "transport", "uber", "bolt.eu", "trainline", "national rail", "lner",
        "avanti", "gwr", "stagecoach", "arriva", "ringgo", "parking", "petrol",
        "shell", "esso", "texaco", "easyjet", "ryanair", "british airways",
    ]),
    ("Health & Wellbeing", [
        "boots", "superdrug", "pharmacy", "puregym", "the gym group", "gym", "david lloyd",
        "nuffield", "dentist", "dental", "bupa", "holland & barrett", "specsavers",
    ]),
    ("Subscriptions", [
        "netflix", "spotify", "disney", "prime video", "amazon prime", "apple.com/bill",
        "itunes", "youtube", "now tv", "audible", "patreon", "icloud", "openai", "chatgpt",
    ]),
    ("Transfers", [
        "transfer", "trf", "moneybox", "getchip", "chip financial", "plum fintech",
        "trading 212", "vanguard", "revolut", "savings", "standing order",
    ]),
]


def categorise_transaction(description: str, txn_type: str) -> str:
    if txn_type == "income":
        return "Income"

    desc = (description or "").lower()
    for category, keywords in CATEGORY_RULES:
        if any(k in desc for k in keywords):
            return category
    return "Other"


# ----------------------------
# Pipeline
# ----------------------------

@dataclass
class Transaction:
    id: str
    date: str
    description: str
    amount: float
    type: str
    category: str
    parser_used: str
    confidence: float
    balance: float | None = field(default=None, repr=False)

    @property
    def signed_amount(self) -> float:
        return -self.amount if self.type == "expense" else self.amount

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "amount": self.amount,
            "type": self.type,
            "category": self.category,
            "parserUsed": self.parser_used,
            "confidence": self.confidence,
        }


def _default_id() -> str:
    return uuid.uuid4().hex


def _run_parser(module_name: str, text: str, year: int, parsers_dir: str) -> list[dict]:
    module = load_parser_module(module_name, parsers_dir)
    if module_name == GENERIC_PARSER:
        payload = text
    elif module_name in BLOB_PARSERS:
        payload = collapse_whitespace(text)
    else:
        payload = split_statement_lines(text)
    return list(module.extract_transactions(payload, year) or [])


def parse_statement(
    raw_text: str,
    page_count: int,
    config: PipelineConfig | None = None,
    today: date | None = None,
    id_factory=None,
) -> list[Transaction]:
    """Turn one statement's extracted text into a validated, categorised ledger.

    Either returns transactions whose confidence clears the threshold, or
    raises ParsingError.
    """
    config = config or PipelineConfig()
    id_factory = id_factory or _default_id

    check_document(raw_text, page_count, config)

    bank = detect_bank_type(raw_text)
    year = detect_year(raw_text, today=today)
    logger.info("Detected bank=%s year=%s pages=%s", bank or "unknown", year, page_count)

    candidates: list[dict] = []
    parser_used = GENERIC_PARSER

    if bank:
        module_name = normalize_bank_name_for_module(bank)
        try:
            candidates = _run_parser(module_name, raw_text, year, config.parsers_dir)
            parser_used = module_name
        except FileNotFoundError:
            raise
        except Exception:
            logger.warning("%s parser failed; falling back to generic parser", bank, exc_info=True)
            candidates = []

    if not candidates:
        if bank:
            logger.info("%s parser found no transactions; trying generic parser", bank)
        parser_used = GENERIC_PARSER
        try:
            candidates = _run_parser(GENERIC_PARSER, raw_text, year, config.parsers_dir)
        except FileNotFoundError:
            raise
        except Exception:
            logger.warning("Generic parser failed", exc_info=True)
            candidates = []

    cleaned = validate_transactions(candidates)
    logger.debug("%s parser: %d candidates, %d valid", parser_used, len(candidates), len(cleaned))

    if not cleaned:
        raise classify_empty_result(raw_text, bank)

    min_rows = GENERIC_MIN_CONFIDENT_ROWS if parser_used == GENERIC_PARSER else MIN_CONFIDENT_ROWS
    confidence = calculate_confidence(cleaned, len(candidates), min_rows=min_rows)
    logger.info("Parsed %d transactions with %s parser (confidence %.2f)", len(cleaned), parser_used, confidence)

    if confidence < config.confidence_threshold:
        raise ParsingError(
            ErrorKind.GENERIC_PARSER_FAILED,
            {
                "confidence": confidence,
                "threshold": config.confidence_threshold,
                "transactionCount": len(cleaned),
                "parserUsed": parser_used,
                "bank": bank,
            },
        )

    return [
        Transaction(
            id=id_factory(),
            date=t["Date"].isoformat(),
            description=t["Description"],
            amount=t["Amount"],
            type=t["Type"],
            category=categorise_transaction(t["Description"], t["Type"]),
            parser_used=parser_used,
            confidence=confidence,
            balance=t.get("Balance"),
        )
        for t in cleaned
    ]


def parse_statement_pdf(pdf_path: str, config: PipelineConfig | None = None, today: date | None = None) -> list[Transaction]:
    text, page_count = extract_pdf_text(pdf_path)
    return parse_statement(text, page_count, config=config, today=today)


def _run_self_tests() -> None:
    assert detect_year("Statement for March 2024, account 2021", today=date(2030, 1, 1)) == 2024
    assert detect_year("no year here", today=date(2030, 1, 1)) == 2030

    assert detect_bank_type("Chase ... Account number 12345678") == "Chase"
    assert detect_bank_type("Card purchase at shop") is None
    assert detect_bank_type("BARCLAYS BANK UK PLC") == "Barclays"

    lines = split_statement_lines(
        "Chase 15 Jan 2024 TESCO STORES Purchase -£45.67 £1,200.00 "
        "16 Jan 2024 PRET A MANGER Purchase -£4.50 £1,195.50"
    )
    assert len(lines) == 2, lines
    assert lines[0].startswith("15 Jan 2024"), lines

    assert categorise_transaction("NETFLIX.COM", "expense") == "Subscriptions"
    assert categorise_transaction("TESCO STORES", "income") == "Income"
    assert categorise_transaction("", "expense") == "Other"

    cleaned = validate_transactions(
        [
            {"Date": date(2024, 1, 1), "Description": " Tesco ", "Amount": -10.0, "Type": "expense"},
            {"Date": "2024-02-30", "Description": "Bad", "Amount": 1.0, "Type": "expense"},
            {"Date": date(2024, 1, 2), "Description": "", "Amount": 1.0, "Type": "expense"},
        ]
    )
    assert len(cleaned) == 1 and cleaned[0]["Amount"] == 10.0, cleaned
    assert calculate_confidence([]) == 0.0

    try:
        parse_statement("too short", 1)
    except ParsingError as e:
        assert e.kind is ErrorKind.PDF_EMPTY, e.kind
    else:
        raise AssertionError("expected PDF_EMPTY")

    print("Self-tests passed.")
