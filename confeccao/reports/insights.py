"""
AI production summary.

summarize(snapshot) turns a JSON snapshot of orders and seamstresses into a
short executive report written by Gemini (REST generateContent endpoint).
It never raises: without an API key, or when the provider fails, the summary
is marked unavailable and carries a placeholder text.
"""
import json
import logging
import os
from typing import NamedTuple

import requests
from django.conf import settings

from confeccao.production.lifecycle import piece_count

logger = logging.getLogger(__name__)

UNAVAILABLE_TEXT = "Análise por IA indisponível: configure a chave GEMINI_API_KEY."
EMPTY_TEXT = "Não foi possível gerar a análise no momento."
FAILURE_TEXT = "Erro ao conectar com a IA da Kavin's. Verifique a chave de API nas configurações."

PROMPT_TEMPLATE = """
Você é um gerente de produção têxtil experiente da empresa "Kavin's".
Analise os dados de produção abaixo (em JSON) e forneça um relatório executivo curto e direto.

Foque em:
1. Gargalos de produção (muitos itens parados em estoque de corte sem costureira?).
2. Desempenho (quem está com muitos pacotes acumulados?).
3. Sugestões de prioridade baseadas no status atual.
4. Use formatação Markdown (negrito, bullet points).
5. Seja motivador mas profissional.

Dados:
{data}
"""


class Summary(NamedTuple):
    available: bool
    text: str


def _setting(name, default=''):
    return getattr(settings, name, os.getenv(name, default))


def build_snapshot(orders, seamstresses):
    """Compact view of the production floor sent to the model"""
    return {
        'orders': [
            {
                'ref': order.reference_code,
                'status': order.status,
                'fabric': order.fabric,
                'total_items': len(order.items or []),
                'cutting_stock': piece_count(order.active_cutting_items),
                'distributions': [
                    {
                        'seamstress': split.get('seamstress_name'),
                        'status': split.get('status'),
                        'pieces': piece_count(split.get('items')),
                    }
                    for split in order.splits or []
                ],
            }
            for order in orders
        ],
        'seamstresses': [{'name': s.name, 'specialty': s.specialty} for s in seamstresses],
    }


def build_prompt(snapshot):
    return PROMPT_TEMPLATE.format(data=json.dumps(snapshot, ensure_ascii=False))


def extract_text(payload):
    """Concatenated text parts of the first candidate, or '' when there are none"""
    if not isinstance(payload, dict):
        return ''
    candidates = payload.get('candidates') or []
    if not candidates:
        return ''
    parts = (candidates[0].get('content') or {}).get('parts') or []
    return ''.join(part.get('text', '') for part in parts).strip()


def summarize(snapshot) -> Summary:
    api_key = _setting('GEMINI_API_KEY')
    if not api_key:
        logger.info("Insights requested but GEMINI_API_KEY is not configured")
        return Summary(False, UNAVAILABLE_TEXT)

    model = _setting('GEMINI_MODEL', 'gemini-2.5-flash')
    base_url = _setting('GEMINI_API_URL', 'https://generativelanguage.googleapis.com/v1beta/models')
    timeout = int(_setting('INSIGHTS_TIMEOUT', 30))

    try:
        response = requests.post(
            f"{base_url.rstrip('/')}/{model}:generateContent",
            params={'key': api_key},
            json={'contents': [{'parts': [{'text': build_prompt(snapshot)}]}]},
            headers={'Content-Type': 'application/json'},
            timeout=timeout
        )
        response.raise_for_status()
        text = extract_text(response.json())
    except requests.exceptions.RequestException as e:
        logger.error(f"Error generating production insights: {str(e)}")
        return Summary(False, FAILURE_TEXT)
    except ValueError as e:
        logger.error(f"Invalid response from insights provider: {str(e)}")
        return Summary(False, FAILURE_TEXT)

    logger.info(f"Production insights generated for {len(snapshot.get('orders', []))} orders")
    return Summary(True, text or EMPTY_TEXT)
