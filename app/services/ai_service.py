"""AI extraction of bank statements using Google Gemini"""

import asyncio
import json
import os
import re
import tempfile
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence
from google import genai
from google.genai import types
from pydantic import ValidationError as PydanticValidationError
from app.core.config import settings
from app.core.exceptions import ExtractionError, ValidationError
from app.core.logging import LoggerMixin
from app.models.statement import DOCUMENT_TYPES, IMAGE_TYPES
from app.schemas.analysis import AnalysisResult

FILE_POLL_INTERVAL_SECONDS = 2

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```\s*$")

ANALYSIS_PROMPT = """You are a financial analyst for a business financing company. Analyze these bank statements thoroughly to assess the business's financial health and funding eligibility.

IMPORTANT: Return ONLY valid JSON with NO markdown formatting, NO backticks, and NO additional text. The response must be pure JSON that can be parsed directly.

Analyze the statements and extract:
1. Business identification (name, bank, account)
2. Monthly financial data (deposits, withdrawals, balances, negative days)
3. Revenue patterns and growth trends
4. Expense categories and spending patterns
5. Existing debt obligations (look for MCA/loan payments - daily ACH debits to lenders)
6. Cash flow health indicators
7. Red flags (NSF fees, overdrafts, returned items, irregular patterns)
8. Overall fundability assessment

Return this exact JSON structure:
{
  "businessName": "extracted business name or 'Business Name Not Found'",
  "accountNumber": "last 4 digits only",
  "bankName": "bank name",
  "periodCovered": {"start": "YYYY-MM-DD", "end": "YYYY-MM-DD"},
  "monthlyData": [
    {
      "month": "YYYY-MM",
      "monthName": "Month Year",
      "beginningBalance": 0,
      "endingBalance": 0,
      "totalDeposits": 0,
      "totalWithdrawals": 0,
      "negativeDays": 0,
      "averageDailyBalance": 0
    }
  ],
  "revenueAnalysis": {
    "estimatedMonthlyRevenue": 0,
    "revenueGrowthPercent": 0,
    "primaryRevenueSources": ["credit card processing", "ACH deposits", "wire transfers"],
    "revenueConsistency": "high/medium/low"
  },
  "expenseAnalysis": {
    "categories": {
      "payroll": 0,
      "rent": 0,
      "utilities": 0,
      "mcaPayments": 0,
      "loanPayments": 0,
      "merchantFees": 0,
      "bankFees": 0,
      "vendors": 0,
      "other": 0
    },
    "totalMonthlyExpenses": 0,
    "largestExpenseCategory": "category name"
  },
  "debtObligations": {
    "identifiedMCAPositions": [
      {"lender": "lender name", "estimatedDailyPayment": 0, "status": "active/suspected"}
    ],
    "totalDailyDebtPayments": 0,
    "estimatedMonthlyDebtService": 0
  },
  "cashFlowHealth": {
    "score": 0-100,
    "rating": "Excellent/Good/Fair/Poor/Critical",
    "overdraftFrequency": "none/rare/occasional/frequent",
    "totalOverdraftFees": 0,
    "cashFlowTiming": "healthy/tight/strained"
  },
  "fundabilityAssessment": {
    "score": 0-100,
    "rating": "Excellent/Good/Fair/Poor/Not Recommended",
    "estimatedFundingCapacity": 0,
    "recommendedProducts": ["Revenue Based Financing", "Term Loan", "Line of Credit", "Equipment Financing"],
    "strengths": ["list of positive factors"],
    "concerns": ["list of concerns or risks"],
    "recommendations": ["actionable recommendations to improve fundability"]
  },
  "redFlags": [
    {"type": "type of flag", "description": "detailed description", "severity": "high/medium/low", "amount": null or number}
  ],
  "insights": [
    {"category": "Revenue/Expenses/CashFlow/Debt/Operations", "title": "short title", "description": "detailed insight", "actionable": true/false, "priority": "high/medium/low"}
  ],
  "summary": "A comprehensive 2-3 paragraph executive summary of the business's financial health, key observations, and funding recommendation."
}

Be thorough and accurate. If data is unclear or missing, make reasonable estimates based on available information and note any assumptions. Focus on providing actionable insights that help both the business owner understand their finances and the lender assess funding eligibility."""


class FileKind(Enum):
    DOCUMENT = "document"
    IMAGE = "image"


@dataclass(frozen=True)
class ExtractionFile:
    """One statement file handed to the model"""
    content: bytes
    mime_type: str
    filename: str = "statement"


def classify(mime_type: str) -> FileKind:
    if mime_type in DOCUMENT_TYPES:
        return FileKind.DOCUMENT
    if mime_type in IMAGE_TYPES:
        return FileKind.IMAGE
    raise ValidationError(
        "Unsupported file type for analysis",
        details={"content_type": mime_type},
    )


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around a JSON payload"""
    text = text.strip()
    text = _LEADING_FENCE.sub("", text)
    text = _TRAILING_FENCE.sub("", text)
    return text.strip()


class ExtractionService(LoggerMixin):
    """Turns a batch of statement files into an ``AnalysisResult``.

    PDFs go through the Gemini Files API; images are sent inline. The call is
    made once per batch and is never retried here.
    """

    def __init__(self, client: Optional[genai.Client] = None):
        self.client = client or genai.Client(api_key=settings.GEMINI_API_KEY)

    async def extract(self, files: Sequence[ExtractionFile]) -> AnalysisResult:
        if not files:
            raise ValidationError("At least one file is required for analysis")

        kinds = [classify(f.mime_type) for f in files]
        self.log_operation(
            "extraction_start",
            file_count=len(files),
            documents=kinds.count(FileKind.DOCUMENT),
            images=kinds.count(FileKind.IMAGE),
        )

        uploaded = []
        try:
            contents: List[Any] = []
            for f, kind in zip(files, kinds):
                if kind is FileKind.DOCUMENT:
                    uploaded_file = await self._upload_document(f)
                    uploaded.append(uploaded_file)
                    contents.append(uploaded_file)
                else:
                    contents.append(types.Part.from_bytes(data=f.content, mime_type=f.mime_type))
            contents.append(ANALYSIS_PROMPT)

            try:
                response = await self.client.aio.models.generate_content(
                    model=settings.GEMINI_MODEL,
                    contents=contents,
                    config=types.GenerateContentConfig(
                        max_output_tokens=settings.GEMINI_MAX_OUTPUT_TOKENS,
                        response_mime_type="application/json",
                    ),
                )
            except Exception as e:
                self.log_error(e, "generate_content")
                raise ExtractionError(f"AI service error: {e}")

            analysis = self.parse_response(self._response_text(response))
        finally:
            for uploaded_file in uploaded:
                await self._delete_uploaded(uploaded_file)

        self.log_operation(
            "extraction_complete",
            months=analysis.months,
            red_flags=len(analysis.red_flags),
        )
        return analysis

    def parse_response(self, text: str) -> AnalysisResult:
        """Parse the model's text payload into an ``AnalysisResult``"""
        json_text = strip_code_fences(text)
        try:
            payload = json.loads(json_text)
        except json.JSONDecodeError as e:
            self.log_error(e, "parse_response", response_text=json_text[:500])
            raise ExtractionError("Failed to parse analysis results. Please try again.")

        try:
            return AnalysisResult.model_validate(payload)
        except PydanticValidationError as e:
            self.log_error(e, "validate_response")
            raise ExtractionError(
                "Analysis results did not match the expected structure",
                details={"errors": e.errors(include_url=False, include_context=False)},
            )

    def _response_text(self, response) -> str:
        text = getattr(response, "text", None) if response is not None else None
        if not text or not text.strip():
            raise ExtractionError("No text response from the AI model")
        return text

    async def _upload_document(self, f: ExtractionFile):
        suffix = os.path.splitext(f.filename)[1] or ".pdf"
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as temp_file:
            temp_file.write(f.content)
            temp_file.flush()

        try:
            self.log_operation("uploading_file_to_gemini", filename=f.filename)
            uploaded_file = await self.client.aio.files.upload(
                file=temp_file.name,
                config=types.UploadFileConfig(mime_type=f.mime_type, display_name=f.filename),
            )

            while self._state(uploaded_file) == "PROCESSING":
                self.log_operation("waiting_for_file_processing", filename=f.filename)
                await asyncio.sleep(FILE_POLL_INTERVAL_SECONDS)
                uploaded_file = await self.client.aio.files.get(name=uploaded_file.name)
        except Exception as e:
            self.log_error(e, "upload_document", filename=f.filename)
            raise ExtractionError(f"AI service error: {e}")
        finally:
            try:
                os.unlink(temp_file.name)
            except OSError as e:
                self.log_error(e, "temp_file_cleanup_failed")

        if self._state(uploaded_file) == "FAILED":
            await self._delete_uploaded(uploaded_file)
            raise ExtractionError("File processing failed in Gemini", details={"filename": f.filename})

        return uploaded_file

    async def _delete_uploaded(self, uploaded_file) -> None:
        try:
            await self.client.aio.files.delete(name=uploaded_file.name)
            self.log_operation("gemini_file_cleanup_successful")
        except Exception as e:
            self.log_error(e, "gemini_file_cleanup_failed")

    @staticmethod
    def _state(uploaded_file) -> Optional[str]:
        state = getattr(uploaded_file, "state", None)
        return getattr(state, "name", None)


extraction_service = ExtractionService()
