import logging

from gspread import Spreadsheet, Worksheet

from ._retry import retry


logger = logging.getLogger(__name__)


def get_range_values(
        spreadsheet: Spreadsheet,
        range_name: str,
        tries: int = 3,
) -> list[list[str]]:
    """
    Lê um intervalo nomeado (A1) em uma única requisição, em ordem de linhas.

    Args:
        spreadsheet (Spreadsheet): Planilha de origem.
        range_name (str): Intervalo no formato A1, ex: "Form Responses 1!A:K".
        tries (int): Tentativas para erros transitórios.

    Returns:
        list[list[str]]: Linhas como listas de strings. Células finais vazias
        não são retornadas pela API, então as linhas podem ter tamanhos diferentes.
    """
    logger.debug("Lendo o intervalo '%s' da planilha '%s'.", range_name, spreadsheet.title)

    response = retry(lambda: spreadsheet.values_get(range_name), tries=tries)
    rows = response.get("values", [])

    logger.debug("%d linhas lidas do intervalo '%s'.", len(rows), range_name)
    return rows


def get_column_values(
        worksheet: Worksheet,
        column_index: int,
) -> list[str]:
    """
    Retorna todos os valores de uma coluna, incluindo o cabeçalho.

    Args:
        worksheet (Worksheet): Aba onde a coluna será lida.
        column_index (int): Índice da coluna (1-based, padrão gspread).

    Returns:
        list[str]: Lista de valores da coluna.
    """
    logger.debug("Baixando coluna %d da aba '%s'", column_index, worksheet.title)
    return retry(lambda: worksheet.col_values(column_index))


def select_first_by_columns(
        worksheet: Worksheet,
        mapping: dict[str, int],
        column_filters: dict[str, str],
) -> tuple[int, list[str]] | None:
    """
    Seleciona a primeira linha (após o cabeçalho) que satisfaça todos os filtros.

    Args:
        worksheet (Worksheet): Aba onde a busca será realizada.
        mapping (dict[str, int]): Mapeamento {nome_coluna: indice}.
        column_filters (dict[str, str]): Mapeamento {nome_coluna: valor_esperado}.

    Returns:
        tuple[int, list[str]] | None: (row_number, row_values) ou None.
    """
    index_filters = {mapping[name]: value for name, value in column_filters.items()}

    rows = retry(lambda: worksheet.get_all_values())

    for row_number, row in enumerate(rows[1:], start=2):
        if all(
            (row[index] if index < len(row) else "") == value
            for index, value in index_filters.items()
        ):
            return row_number, row

    return None


def append_row(
        worksheet: Worksheet,
        row: list[str],
) -> None:
    """Adiciona uma única linha ao final da aba (sem retry)."""
    logger.debug("Adicionando uma linha na aba '%s'.", worksheet.title)
    retry(lambda: worksheet.append_row(row), tries=1)


def append_rows(
        worksheet: Worksheet,
        rows: list[list],
) -> None:
    """
    Adiciona várias linhas ao final da aba em uma única requisição.

    A API aplica a escrita inteira ou nada. Não há retry: se a resposta se
    perder depois de uma escrita bem-sucedida, repetir duplicaria as linhas.

    Args:
        worksheet (Worksheet): Aba onde as linhas serão adicionadas.
        rows (list[list]): Linhas a serem adicionadas.
    """
    if not rows:
        logger.debug("Nenhuma linha para adicionar na aba '%s'.", worksheet.title)
        return

    logger.debug("Adicionando %d linhas na aba '%s'.", len(rows), worksheet.title)

    retry(
        lambda: worksheet.append_rows(rows, value_input_option="RAW"),
        tries=1,
    )

    logger.debug("%d linhas adicionadas com sucesso na aba '%s'.", len(rows), worksheet.title)


def get_row(
        worksheet: Worksheet,
        row_number: int,
) -> list[str] | None:
    """
    Lê uma linha pelo número (1-based).

    Returns:
        list[str] | None: Valores da linha, ou None se estiver vazia.
    """
    row = retry(lambda: worksheet.row_values(row_number))
    return row or None


def update_row(
        worksheet: Worksheet,
        row_number: int,
        new_row: list[str],
) -> None:
    """
    Substitui o conteúdo completo de uma linha.

    Args:
        worksheet (Worksheet): Aba onde a linha será atualizada.
        row_number (int): Número da linha (1-based).
        new_row (list[str]): Novos valores da linha.
    """
    logger.debug("Atualizando a linha %d da aba '%s'.", row_number, worksheet.title)
    cell_range = f"{row_number}:{row_number}"
    retry(lambda: worksheet.update(values=[new_row], range_name=cell_range))
