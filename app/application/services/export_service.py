"""
CSV 내보내기 서비스
관리자 화면의 "CSV 다운로드" 기능

[형식]
- 컬럼: bib, name, created_at, payment_status
- created_at: DISPLAY_TIMEZONE 기준 "DD/MM/YYYY HH:MM:SS"
- 스프레드시트 호환을 위해 UTF-8 BOM을 앞에 붙임
"""
import csv
import io
from datetime import datetime, timezone
from typing import Iterable
from zoneinfo import ZoneInfo

from app.infrastructure.persistence.models.enums import PaymentStatusEnum
from app.infrastructure.persistence.models.registrants import Registrant

CSV_HEADER = ["bib", "name", "created_at", "payment_status"]
CSV_FILENAME = "registrants.csv"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
UTF8_BOM = "\ufeff"


def format_created_at(value: datetime, tz_name: str) -> str:
    """표시용 시각 문자열 (naive datetime은 UTC로 간주)"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz_name)).strftime("%d/%m/%Y %H:%M:%S")


def render_registrants_csv(registrants: Iterable[Registrant], tz_name: str) -> str:
    """참가자 목록을 CSV 문자열로 변환 (BOM 포함)"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for registrant in registrants:
        writer.writerow([
            registrant.bib,
            registrant.name,
            format_created_at(registrant.created_at, tz_name),
            PaymentStatusEnum(registrant.payment_status).value,
        ])
    return UTF8_BOM + buffer.getvalue()
