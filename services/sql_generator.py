from typing import Dict, Optional
import logging
import openai
from models.task import TASK_COLUMNS
from services.errors import DownstreamUnavailable
from services.sql_candidate import SQLCandidate

SYSTEM_PROMPT = (
    "Sos un experto en SQL para PostgreSQL. Respondé únicamente con una consulta "
    "SELECT cruda, sin formato markdown ni comillas invertidas. Si la pregunta no "
    "se puede responder con la tabla disponible, respondé en una sola oración en español."
)

class SQLGenerator:
    """Asks an OpenAI chat model to turn a Spanish question into SQL over ric01"""

    def __init__(
        self,
        openai_api_key: str,
        model: str = "gpt-4o-mini",
        table_name: str = "ric01",
        columns: Optional[Dict[str, str]] = None,
        client: Optional[openai.OpenAI] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.model = model
        self.table_name = table_name
        self.columns = columns or TASK_COLUMNS
        self.openai_api_key = openai_api_key
        self.client = client

    def build_prompt(self, question: str) -> str:
        columns_context = "\n".join([
            f"- {col}: {desc}"
            for col, desc in self.columns.items()
        ])

        return f"""Dada la tabla {self.table_name} con las siguientes columnas:

    {columns_context}

    Una tarea está pendiente cuando fin es false o NULL.
    Los valores de area tienen la forma 'Area <número>'.

    Generá una consulta SQL para la siguiente pregunta:
    {question}

    Devolvé solo la consulta SQL cruda, sin formato markdown ni comillas invertidas.
    """

    async def generate_sql(self, question: str) -> SQLCandidate:
        """Return the model reply tagged as SQL or plain text"""
        prompt = self.build_prompt(question)
        self.logger.debug(f"Prompt sent to language model:\n{prompt}")

        try:
            if self.client is None:
                self.client = openai.OpenAI(api_key=self.openai_api_key)
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt}
                ],
                temperature=0.1,
                max_tokens=500
            )
        except openai.OpenAIError as e:
            self.logger.error(f"Language model call failed: {str(e)}")
            raise DownstreamUnavailable("El servicio de lenguaje no está disponible") from e

        content = response.choices[0].message.content or ""
        candidate = SQLCandidate.from_text(content)
        self.logger.info(f"Language model returned {candidate.kind.value}: {candidate.body}")
        return candidate
