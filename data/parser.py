"""
Декодеры входных файлов: Excel, CSV и PDF.

Функции:
- read_workbook(): все листы книги как сетки примитивов
- read_csv(): CSV как сетка строк (первая строка — заголовок)
- extract_pdf_text(): весь текст PDF одной строкой

Любая ошибка чтения превращается в FileDecodeFailure.
"""

import io
import math
from typing import Union
import logging

import pandas as pd
import pdfplumber

from data.cleaner import Grid
from data.errors import FileDecodeFailure
from data.models import FileType

logger = logging.getLogger(__name__)


_EXCEL_ENGINES = {
    FileType.XLSX: "openpyxl",
    FileType.XLS: "xlrd",
}


def read_workbook(content: bytes, file_type: FileType = FileType.XLSX) -> dict[str, Grid]:
    """
    Читает все листы Excel-книги.

    Args:
        content: байты файла
        file_type: XLSX или XLS (определяет движок)

    Returns:
        dict {имя листа: сетка}, в порядке листов книги

    Raises:
        FileDecodeFailure: если книгу не удалось прочитать
    """
    engine = _EXCEL_ENGINES.get(file_type, "openpyxl")

    try:
        frames = pd.read_excel(
            io.BytesIO(content),
            sheet_name=None,
            header=None,
            engine=engine,
        )
    except Exception as e:
        logger.error(f"Ошибка при чтении Excel ({engine}): {e}")
        raise FileDecodeFailure(f"Failed to parse Excel file: {e}")

    sheets = {str(name): _frame_to_grid(df) for name, df in frames.items()}
    logger.debug(f"Excel прочитан, листов: {len(sheets)}")
    return sheets


def read_csv(content: Union[str, bytes]) -> Grid:
    """
    Парсит CSV.

    Пробует разные кодировки и разделители. Строки с лишними полями
    пропускаются.

    Raises:
        FileDecodeFailure: если ни одна кодировка не подошла
    """
    if isinstance(content, str):
        return _read_csv_text(content)

    # Пробуем разные кодировки
    encodings = ["utf-8-sig", "cp1251", "latin-1"]

    for encoding in encodings:
        try:
            text = content.decode(encoding)
        except UnicodeDecodeError:
            continue
        logger.debug(f"CSV декодирован с кодировкой {encoding}")
        return _read_csv_text(text)

    raise FileDecodeFailure("Failed to parse CSV: unable to detect file encoding")


def _read_csv_text(text: str) -> Grid:
    if not text.strip():
        return []

    try:
        # Сначала пробуем стандартный разделитель (запятая)
        df = _csv_frame(text, sep=",")

        # Если получилась одна колонка — возможно разделитель точка с запятой
        if len(df.columns) == 1 and ";" in str(df.iat[0, 0] if not df.empty else ""):
            df = _csv_frame(text, sep=";")
    except Exception as e:
        logger.error(f"Ошибка при чтении CSV: {e}")
        raise FileDecodeFailure(f"Failed to parse CSV: {e}")

    grid = _frame_to_grid(df)
    logger.debug(f"CSV прочитан, колонок: {len(df.columns)}, строк: {len(grid)}")
    return grid


def _csv_frame(text: str, sep: str) -> pd.DataFrame:
    return pd.read_csv(
        io.StringIO(text),
        sep=sep,
        header=None,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        skipinitialspace=True,
        on_bad_lines="skip",
    )


def extract_pdf_text(content: bytes) -> str:
    """
    Достаёт текст из PDF постранично.

    Raises:
        FileDecodeFailure: если PDF не открывается
    """
    try:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.error(f"Ошибка при чтении PDF: {e}")
        raise FileDecodeFailure(f"Failed to parse PDF: {e}")

    logger.debug(f"PDF прочитан, страниц: {len(pages)}")
    return "\n".join(pages)


def _frame_to_grid(df: pd.DataFrame) -> Grid:
    """DataFrame -> list[list], NaN -> None, numpy-скаляры -> Python"""
    grid = []
    for row in df.itertuples(index=False, name=None):
        grid.append([_to_primitive(value) for value in row])
    return grid


def _to_primitive(value):
    if value is None:
        return None
    if hasattr(value, "item"):
        # numpy-скаляры
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str) and value == "":
        return None
    if isinstance(value, (str, int, float, bool)):
        return value
    # Даты и прочее — строкой
    return str(value)
