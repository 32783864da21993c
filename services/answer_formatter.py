import pandas as pd

AREA_COLUMNS = {"area", "reasignado_a"}
PERSON_COLUMNS = {"asignado", "usuario", "nombre", "personal", "reasignado_por"}
PREVIEW_ROWS = 5

NO_RESULTS = "No se encontraron resultados."


def _value(value) -> str:
    # array_agg / json_agg cells come back as lists or dicts
    if isinstance(value, dict):
        return ", ".join(f"{key}: {_value(item)}" for key, item in value.items())
    if not pd.api.types.is_scalar(value):
        return ", ".join(_value(item) for item in value)
    if pd.isna(value):
        return "sin dato"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _grouped(df: pd.DataFrame, header: str) -> str:
    lines = [header]
    for key, value in df.itertuples(index=False, name=None):
        lines.append(f"- {_value(key)}: {_value(value)}")
    return "\n".join(lines)


def format_results(df: pd.DataFrame) -> str:
    """Render a query result as a short Spanish answer"""
    if df.empty:
        return NO_RESULTS

    rows, cols = df.shape
    if rows == 1 and cols == 1:
        return f"El resultado es {_value(df.iat[0, 0])}."

    if cols == 2:
        key_column = str(df.columns[0]).lower()
        if key_column in AREA_COLUMNS:
            return _grouped(df, "Resultados por área:")
        if key_column in PERSON_COLUMNS:
            return _grouped(df, "Resultados por persona:")

    # Flat listing, bounded preview
    lines = []
    for record in df.head(PREVIEW_ROWS).to_dict(orient="records"):
        lines.append("- " + ", ".join(f"{col}: {_value(val)}" for col, val in record.items()))
    if rows > PREVIEW_ROWS:
        lines.append(f"... y {rows - PREVIEW_ROWS} resultados más.")
    return "\n".join(lines)
