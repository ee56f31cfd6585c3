import logging

from gspread import Spreadsheet, Worksheet, WorksheetNotFound

from ._retry import retry

logger = logging.getLogger(__name__)


def _check_header(worksheet: Worksheet, expected_header: list[str]) -> None:
    """
    Confere se a primeira linha da aba é exatamente o cabeçalho esperado.

    Uma aba recém-criada pelo Sheets (sem nenhuma linha) recebe o cabeçalho.

    Raises:
        ValueError: Se a aba já tiver um cabeçalho diferente.
    """
    current = retry(lambda: worksheet.row_values(1))

    if not current:
        logger.info("Aba '%s' sem cabeçalho. Escrevendo cabeçalho esperado.", worksheet.title)
        retry(lambda: worksheet.insert_row(expected_header, index=1), tries=1)
        return

    if current != expected_header:
        logger.error(
            "Cabeçalho da aba '%s' não corresponde ao esperado: %s", worksheet.title, current
        )
        raise ValueError(f"O cabeçalho da aba '{worksheet.title}' não corresponde ao esperado.")


def get_header_mapping(worksheet: Worksheet) -> dict[str, int]:
    """
    Mapeia os nomes de coluna do cabeçalho de uma aba para seus índices (0-based).

    Args:
        worksheet (Worksheet): A aba cujo cabeçalho será lido.

    Returns:
        dict[str, int]: Dicionário {nome_coluna: indice}.
    """
    header = retry(lambda: worksheet.row_values(1))

    mapping: dict[str, int] = {}
    for index, column_name in enumerate(header):
        if column_name in mapping:
            raise ValueError(f"Nome de coluna duplicado encontrado no cabeçalho: '{column_name}'")
        mapping[column_name] = index

    logger.debug("Mapeamento de cabeçalho da aba '%s': %s", worksheet.title, mapping)
    return mapping


def _create_worksheet(
    spreadsheet: Spreadsheet, worksheet_name: str, header: list[str]
) -> Worksheet:
    logger.debug("Criando a aba '%s' na planilha '%s'.", worksheet_name, spreadsheet.title)
    worksheet = retry(
        lambda: spreadsheet.add_worksheet(title=worksheet_name, rows=100, cols=len(header)),
        tries=1,
    )
    retry(lambda: worksheet.insert_row(header, index=1), tries=1)
    logger.info("Aba criada com sucesso: %s", worksheet.title)
    return worksheet


def get_worksheet(
    spreadsheet: Spreadsheet,
    worksheet_name: str,
    header: list[str],
    create: bool = True,
) -> Worksheet:
    """
    Obtém uma aba da planilha, validando o cabeçalho e criando-a se necessário.

    Args:
        spreadsheet (Spreadsheet): A planilha onde a aba será obtida.
        worksheet_name (str): Nome da aba.
        header (list[str]): Cabeçalho esperado.
        create (bool): Cria a aba (com o cabeçalho) se ela não existir.

    Returns:
        Worksheet: A aba obtida ou criada.
    """
    try:
        logger.debug("Obtendo a aba '%s' da planilha '%s'.", worksheet_name, spreadsheet.title)
        worksheet = retry(lambda: spreadsheet.worksheet(worksheet_name))
        _check_header(worksheet, header)
        return worksheet

    except WorksheetNotFound:
        logger.warning(
            "Aba '%s' não encontrada na planilha '%s'.", worksheet_name, spreadsheet.title
        )
        if create:
            return _create_worksheet(spreadsheet, worksheet_name, header)
        raise
