"""
Prompt templates sent to the generation service.

The report templates fix two things the presentation layer relies on:
every top-level section is a `## ` heading, and the traffic comparison is a
markdown table whose header starts `| Concorrente | Busca Orgânica (%) |`.
"""

from typing import List

TRAFFIC_TABLE_HEADER = (
    "| Concorrente | Busca Orgânica (%) | Busca Paga (%) | Social (%) | Direto (%) | Referência (%) |\n"
    "|---|---|---|---|---|---|"
)


def _table_example(competitors: List[str]) -> str:
    rows = "\n".join(
        f"| {c} | [valor] | [valor] | [valor] | [valor] | [valor] |" for c in competitors
    )
    return f"{TRAFFIC_TABLE_HEADER}\n{rows}"


def standard_report_prompt(competitors: List[str]) -> str:
    return f"""Você é SPYGLASS, uma IA especialista em inteligência competitiva de marketing. Sua missão é gerar um plano de análise detalhado e acionável.

**Alvos:** {", ".join(competitors)}

**Formato do Relatório (Obrigatório, use Markdown):**

# Análise Competitiva: Dossiê de Inteligência

## Resumo Executivo
Uma visão geral concisa dos concorrentes e as principais descobertas.

## Resumo Comparativo das Fontes de Tráfego
Uma tabela Markdown com as fontes de tráfego estimadas (em %), exatamente nesta estrutura:
{_table_example(competitors)}
(Substitua os [valor] por estimativas percentuais realistas.)

## Análise de Palavras-chave e SEO
Principais palavras-chave, autoridade de domínio e estratégia de backlinks.

## Estratégia de Conteúdo e Marketing
Tipos de conteúdo produzidos e campanhas recentes.

## Presença nas Redes Sociais
Plataformas dominantes, engajamento e estratégia de postagem.

## Ameaças e Oportunidades (Análise SWOT)
Forças, fraquezas, oportunidades e ameaças de cada concorrente.

## Plano de Ação Recomendado
3-5 ações concretas e de alto impacto.

Cada seção de nível superior DEVE começar com "## ". Seja direto, analítico e use uma linguagem que um estrategista de marketing entenderia."""


def deep_report_prompt(competitors: List[str]) -> str:
    return f"""Como SPYGLASS, uma IA de inteligência de marketing, realize uma **investigação profunda e atualizada** sobre os seguintes concorrentes: {", ".join(competitors)}. Utilize a pesquisa na web para obter os dados mais recentes.

**Siga estritamente o formato de relatório Markdown abaixo:**

# Investigação Profunda: Dossiê de Inteligência Aprimorado

## Resumo Executivo Estratégico
Análise concisa baseada nos dados mais recentes, destacando movimentos estratégicos.

## Resumo Comparativo das Fontes de Tráfego
{_table_example(competitors)}

## Análise de SEO e Táticas de Conteúdo Recentes
Palavras-chave em ascensão e campanhas lançadas nos últimos 6 meses.

## Desempenho e Estratégia em Mídias Sociais
Sentimento do público, parcerias com influenciadores e campanhas pagas.

## Análise SWOT Tática (Baseada em Eventos Recentes)
Forças, fraquezas, oportunidades e ameaças recentes.

## Recomendações de Ação Imediata
3 a 5 ações urgentes para explorar uma fraqueza descoberta.

Cada seção de nível superior DEVE começar com "## "."""


def narration_summary_prompt(report: str) -> str:
    return f'''Você é um diretor de cinema criando um trailer para um filme de espionagem. Transforme o seguinte relatório de inteligência em um roteiro de áudio curto, dramático e impactante (máximo de 3-4 frases curtas). Use uma linguagem de suspense e foque nas descobertas mais críticas.

Relatório:
"""
{report}
"""

Exemplo de Saída: "Enquanto os alvos dormem, suas fraquezas foram expostas. Uma nova estratégia emerge das sombras. É hora de atacar."

Roteiro do Trailer:'''


TRANSCRIPTION_PROMPT = "Transcreva este áudio em português."
