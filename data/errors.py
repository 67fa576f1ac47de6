"""
Ошибки разбора документов.

Все жёсткие ошибки наследуются от IngestionError и на публичной границе
превращаются в ParsingResult(success=False). Пропуск строки — не ошибка:
парсеры строк просто возвращают None.
"""


class IngestionError(Exception):
    """Базовая ошибка разбора документа"""
    pass


class FileDecodeFailure(IngestionError):
    """Файл повреждён или не читается"""
    pass


class UnsupportedFileType(IngestionError):
    """Формат файла не поддерживается"""

    def __init__(self, file_type: str):
        self.file_type = file_type
        super().__init__(
            f"Unsupported file type: {file_type}. "
            f"Only CSV, PDF, and Excel files are supported."
        )


class EmptyDocumentFailure(IngestionError):
    """В документе нет даже заголовка и одной строки данных"""

    def __init__(self, format_name: str):
        super().__init__(f"{format_name} file must have at least a header and one data row")


class SheetSelectionFailure(IngestionError):
    """Ни один лист книги не набрал минимальный балл"""

    def __init__(self, message: str = "No suitable financial data sheet found"):
        super().__init__(message)


class ColumnMappingFailure(IngestionError):
    """Не найдена обязательная колонка. Подтипы — по имени колонки."""

    column = "unknown"

    def __init__(self, message: str = ""):
        super().__init__(message or f"Required column not found: {self.column}")

    @classmethod
    def for_column(cls, column: str) -> "ColumnMappingFailure":
        subtype = _COLUMN_FAILURES.get(column, cls)
        return subtype()


class MissingAccountColumn(ColumnMappingFailure):
    column = "account"


class MissingAmountColumn(ColumnMappingFailure):
    column = "amount"


class MissingDebitColumn(ColumnMappingFailure):
    column = "debit"


class MissingCreditColumn(ColumnMappingFailure):
    column = "credit"


_COLUMN_FAILURES = {
    failure.column: failure
    for failure in (MissingAccountColumn, MissingAmountColumn, MissingDebitColumn, MissingCreditColumn)
}
