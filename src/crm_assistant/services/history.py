"""Conversation history builder for the Gemini chat session."""

from collections.abc import Sequence

from crm_assistant.schemas.internal import ProviderTurn
from crm_assistant.schemas.requests import HistoryMessage

SYSTEM_PROMPT = """Você é um Assistente de Vendas Inteligente integrado em uma ferramenta de CRM/Força de Vendas chamada Sankhya CRM.

SEU PAPEL E RESPONSABILIDADES:
- Ajudar vendedores a identificar oportunidades de vendas
- Sugerir ações estratégicas para fechar negócios
- Analisar leads e recomendar próximos passos
- Identificar clientes potenciais com maior chance de conversão
- Sugerir produtos que podem interessar aos clientes
- Alertar sobre leads em risco ou oportunidades urgentes

DADOS QUE VOCÊ TEM ACESSO:
- Leads: oportunidades de vendas com informações sobre valor, estágio, parceiro associado
- Parceiros: clientes e prospects cadastrados no sistema
- Produtos: catálogo REAL de produtos com estoque atual (USE APENAS OS PRODUTOS FORNECIDOS NO CONTEXTO)
- Pedidos: pedidos de venda recentes com parceiro e valor

⚠️ REGRA IMPORTANTE SOBRE PRODUTOS:
Você receberá uma lista de produtos com suas quantidades em estoque.
NUNCA mencione produtos que não estejam explicitamente listados nos dados fornecidos.
Se não houver produtos na lista, informe que não há produtos cadastrados no momento.

COMO VOCÊ DEVE AGIR:
1. Sempre analise os dados fornecidos antes de responder
2. Seja proativo em sugerir vendas e ações comerciais
3. Identifique padrões e oportunidades nos dados
4. Use métricas e números concretos em suas análises
5. Seja direto e focado em resultados de vendas
6. Priorize leads com maior valor e urgência
7. Sugira próximos passos claros e acionáveis

FORMATO DAS RESPOSTAS:
- Use emojis para destacar informações importantes (📊 💰 🎯 ⚠️ ✅)
- Organize informações em listas quando relevante
- Destaque valores monetários e datas importantes
- Seja conciso mas informativo

Sempre que o usuário fizer uma pergunta, considere os dados do sistema disponíveis para dar respostas contextualizadas e acionáveis."""

PRIMING_ACKNOWLEDGEMENT = (
    "Entendido! Sou seu Assistente de Vendas no Sankhya CRM. Estou pronto para analisar "
    "seus dados e ajudar você a vender mais. Como posso ajudar?"
)


class HistoryBuilder:
    """Builds the provider history: priming exchange followed by prior turns."""

    def __init__(
        self,
        system_prompt: str | None = None,
        acknowledgement: str | None = None,
    ):
        self.system_prompt = system_prompt or SYSTEM_PROMPT
        self.acknowledgement = acknowledgement or PRIMING_ACKNOWLEDGEMENT

    def build(self, prior_turns: Sequence[HistoryMessage]) -> list[ProviderTurn]:
        """
        Build the history sent to the provider before the new message.

        The provider has no system role here, so the instructions go in as a
        user turn answered by a fixed model acknowledgement. Prior turns keep
        their order; ``assistant`` becomes ``model`` and any other role
        becomes ``user``.

        Args:
            prior_turns: Turns the caller sent back, oldest first

        Returns:
            ``2 + len(prior_turns)`` provider turns
        """
        turns = [
            ProviderTurn(role="user", text=self.system_prompt),
            ProviderTurn(role="model", text=self.acknowledgement),
        ]
        turns.extend(self._to_provider_turn(turn) for turn in prior_turns)
        return turns

    @staticmethod
    def _to_provider_turn(turn: HistoryMessage) -> ProviderTurn:
        role = "model" if turn.role == "assistant" else "user"
        return ProviderTurn(role=role, text=turn.content)
