"""
Servico do Teste Vocacional

40 afirmacoes (5 por ministerio), cada uma respondida de 1 a 5.
A soma por ministerio vai de 5 a 25 e o percentual e sum / 25 * 100.
"""
import logging
from typing import Dict, List

logger = logging.getLogger(__name__)

QUESTIONS_PER_MINISTRY = 5
MIN_ANSWER = 1
MAX_ANSWER = 5
MAX_SCORE = QUESTIONS_PER_MINISTRY * MAX_ANSWER


class VocationalTestError(Exception):
    """Respostas invalidas para o teste vocacional"""
    pass


# Ordem do catalogo define o desempate
MINISTRY_ORDER = (
    "midia",
    "louvor",
    "diaconato",
    "integracao",
    "ensino",
    "kids",
    "organizacao",
    "acao_social",
)

QUESTIONS = [
    # Midia e Tecnologia (1-5)
    {"id": 1, "text": "Tenho facilidade com equipamentos eletrônicos e tecnologia", "ministry": "midia"},
    {"id": 2, "text": "Gosto de trabalhar com câmeras, som e iluminação", "ministry": "midia"},
    {"id": 3, "text": "Me sinto confortável operando sistemas durante os cultos", "ministry": "midia"},
    {"id": 4, "text": "Tenho interesse em produzir conteúdo digital para a igreja", "ministry": "midia"},
    {"id": 5, "text": "Consigo solucionar problemas técnicos com facilidade", "ministry": "midia"},

    # Louvor e Adoracao (6-10)
    {"id": 6, "text": "Tenho dom musical (canto ou instrumento)", "ministry": "louvor"},
    {"id": 7, "text": "Me sinto à vontade adorando publicamente", "ministry": "louvor"},
    {"id": 8, "text": "Consigo conduzir outros em momentos de adoração", "ministry": "louvor"},
    {"id": 9, "text": "Tenho facilidade para aprender música rapidamente", "ministry": "louvor"},
    {"id": 10, "text": "A música é uma forma natural de expressar minha fé", "ministry": "louvor"},

    # Diaconato (11-15)
    {"id": 11, "text": "Gosto de servir e ajudar pessoas em necessidade", "ministry": "diaconato"},
    {"id": 12, "text": "Tenho facilidade para identificar quem precisa de ajuda", "ministry": "diaconato"},
    {"id": 13, "text": "Me disponho a tarefas práticas de apoio na igreja", "ministry": "diaconato"},
    {"id": 14, "text": "Consigo organizar e coordenar ações de ajuda", "ministry": "diaconato"},
    {"id": 15, "text": "Sinto alegria em suprir necessidades dos outros", "ministry": "diaconato"},

    # Integracao (16-20)
    {"id": 16, "text": "Gosto de receber e conhecer pessoas novas", "ministry": "integracao"},
    {"id": 17, "text": "Tenho facilidade para fazer novos membros se sentirem bem-vindos", "ministry": "integracao"},
    {"id": 18, "text": "Consigo identificar visitantes e me aproximar deles", "ministry": "integracao"},
    {"id": 19, "text": "Me sinto confortável apresentando a igreja para outros", "ministry": "integracao"},
    {"id": 20, "text": "Tenho dom para criar ambiente acolhedor", "ministry": "integracao"},

    # Ensino e Discipulado (21-25)
    {"id": 21, "text": "Gosto de estudar e ensinar a Palavra de Deus", "ministry": "ensino"},
    {"id": 22, "text": "Tenho facilidade para explicar conceitos bíblicos", "ministry": "ensino"},
    {"id": 23, "text": "Consigo adaptar o ensino para diferentes idades", "ministry": "ensino"},
    {"id": 24, "text": "Me sinto chamado a discipular outras pessoas", "ministry": "ensino"},
    {"id": 25, "text": "Tenho paciência para acompanhar o crescimento espiritual dos outros", "ministry": "ensino"},

    # Kids (26-30)
    {"id": 26, "text": "Gosto de trabalhar com crianças", "ministry": "kids"},
    {"id": 27, "text": "Tenho paciência e criatividade para ensinar crianças", "ministry": "kids"},
    {"id": 28, "text": "Consigo manter a atenção das crianças durante as atividades", "ministry": "kids"},
    {"id": 29, "text": "Me sinto confortável cuidando de grupos de crianças", "ministry": "kids"},
    {"id": 30, "text": "Tenho facilidade para criar atividades lúdicas e educativas", "ministry": "kids"},

    # Organizacao e Administracao (31-35)
    {"id": 31, "text": "Gosto de organizar eventos e atividades", "ministry": "organizacao"},
    {"id": 32, "text": "Tenho facilidade para planejar e coordenar projetos", "ministry": "organizacao"},
    {"id": 33, "text": "Consigo gerenciar recursos e logística", "ministry": "organizacao"},
    {"id": 34, "text": "Me sinto bem liderando equipes de trabalho", "ministry": "organizacao"},
    {"id": 35, "text": "Tenho atenção aos detalhes e gosto de ver tudo funcionando bem", "ministry": "organizacao"},

    # Acao Social (36-40)
    {"id": 36, "text": "Tenho coração para ajudar pessoas em situação de vulnerabilidade", "ministry": "acao_social"},
    {"id": 37, "text": "Gosto de participar de projetos sociais e comunitários", "ministry": "acao_social"},
    {"id": 38, "text": "Tenho facilidade para mobilizar recursos para causas sociais", "ministry": "acao_social"},
    {"id": 39, "text": "Me sinto chamado a levar esperança para comunidades carentes", "ministry": "acao_social"},
    {"id": 40, "text": "Consigo ver as necessidades sociais ao meu redor", "ministry": "acao_social"},
]

MINISTRY_PROFILES = {
    "midia": {
        "name": "Mídia e Tecnologia",
        "description": "Você tem o perfil para trabalhar com equipamentos, tecnologia e produção de conteúdo para amplificar a mensagem do Reino.",
        "characteristics": ["Facilidade com tecnologia", "Atenção aos detalhes técnicos", "Criatividade digital", "Capacidade de trabalhar sob pressão"],
        "activities": ["Operação de som e vídeo", "Produção de conteúdo digital", "Transmissão ao vivo", "Manutenção de equipamentos"],
    },
    "louvor": {
        "name": "Louvor e Adoração",
        "description": "Você tem o dom musical e a capacidade de conduzir outros à presença de Deus através da música e adoração.",
        "characteristics": ["Dom musical", "Coração adorador", "Capacidade de liderança musical", "Sensibilidade espiritual"],
        "activities": ["Ministração em cultos", "Ensaios e preparação musical", "Ministração em eventos especiais", "Mentoria de novos músicos"],
    },
    "diaconato": {
        "name": "Diaconato",
        "description": "Você tem o coração servo e a capacidade de identificar e suprir necessidades práticas das pessoas.",
        "characteristics": ["Coração servo", "Sensibilidade às necessidades", "Organização prática", "Disponibilidade para servir"],
        "activities": ["Apoio em eventos", "Assistência a necessitados", "Organização de campanhas", "Suporte logístico"],
    },
    "integracao": {
        "name": "Integração",
        "description": "Você tem o dom da hospitalidade e a capacidade de fazer novos membros se sentirem acolhidos na família da fé.",
        "characteristics": ["Dom da hospitalidade", "Facilidade de relacionamento", "Empatia natural", "Capacidade de acolhimento"],
        "activities": ["Recepção de visitantes", "Acompanhamento de novos membros", "Organização de eventos de integração", "Criação de vínculos comunitários"],
    },
    "ensino": {
        "name": "Ensino e Discipulado",
        "description": "Você tem o dom do ensino e a capacidade de transmitir conhecimento bíblico de forma clara e transformadora.",
        "characteristics": ["Dom do ensino", "Conhecimento bíblico", "Paciência pedagógica", "Capacidade de comunicação"],
        "activities": ["Ensino em grupos pequenos", "Discipulado individual", "Preparação de materiais didáticos", "Coordenação de cursos"],
    },
    "kids": {
        "name": "Kids",
        "description": "Você tem o coração voltado para as crianças e a capacidade de impactar a próxima geração para Cristo.",
        "characteristics": ["Amor genuíno por crianças", "Criatividade pedagógica", "Paciência especial", "Energia e dinamismo"],
        "activities": ["Ensino para crianças", "Organização de atividades lúdicas", "Desenvolvimento de materiais infantis", "Eventos especiais kids"],
    },
    "organizacao": {
        "name": "Organização e Administração",
        "description": "Você tem o dom administrativo e a capacidade de planejar, organizar e coordenar projetos e eventos.",
        "characteristics": ["Dom administrativo", "Capacidade de planejamento", "Liderança organizacional", "Visão estratégica"],
        "activities": ["Planejamento de eventos", "Coordenação de projetos", "Gestão de recursos", "Desenvolvimento de processos"],
    },
    "acao_social": {
        "name": "Ação Social",
        "description": "Você tem o coração voltado para a justiça social e a capacidade de levar esperança às comunidades necessitadas.",
        "characteristics": ["Sensibilidade social", "Compaixão pelos necessitados", "Capacidade mobilizadora", "Visão transformacional"],
        "activities": ["Projetos comunitários", "Campanhas de arrecadação", "Visitação e assistência", "Parcerias sociais"],
    },
}


def round_half_up(value: float) -> int:
    return int(value + 0.5)


def validate_answers(answers: Dict) -> Dict[int, int]:
    """
    Normaliza as respostas para {question_id: valor}.
    Exige as 40 respostas, cada uma inteira de 1 a 5.
    """
    normalized = {}
    for key, value in answers.items():
        try:
            question_id = int(key)
        except (TypeError, ValueError):
            raise VocationalTestError(f"Pergunta inválida: {key}")
        if isinstance(value, bool) or not isinstance(value, int):
            raise VocationalTestError(f"Resposta da pergunta {question_id} deve ser um inteiro")
        if value < MIN_ANSWER or value > MAX_ANSWER:
            raise VocationalTestError(f"Resposta da pergunta {question_id} deve estar entre 1 e 5")
        normalized[question_id] = value

    expected = {q["id"] for q in QUESTIONS}
    unknown = set(normalized) - expected
    if unknown:
        raise VocationalTestError(f"Perguntas inexistentes: {sorted(unknown)}")
    missing = expected - set(normalized)
    if missing:
        raise VocationalTestError(f"Faltam respostas para {len(missing)} pergunta(s)")

    return normalized


def compute_sums(answers: Dict[int, int]) -> Dict[str, int]:
    """Soma as respostas por ministerio"""
    sums = {key: 0 for key in MINISTRY_ORDER}
    for question in QUESTIONS:
        sums[question["ministry"]] += answers.get(question["id"], 0)
    return sums


def rank_ministries(sums: Dict[str, int]) -> List[dict]:
    """
    Ranking decrescente pela soma. Empates mantem a ordem do catalogo.
    """
    results = []
    for key in MINISTRY_ORDER:
        score = sums.get(key, 0)
        profile = MINISTRY_PROFILES[key]
        results.append({
            "ministry": key,
            "name": profile["name"],
            "description": profile["description"],
            "characteristics": profile["characteristics"],
            "activities": profile["activities"],
            "score": score,
            "percentage": round_half_up(score / MAX_SCORE * 100),
        })

    # sorted e estavel
    return sorted(results, key=lambda r: r["score"], reverse=True)


def score_test(answers: Dict) -> dict:
    """Valida, soma e ranqueia. Retorna sums, results e recommended."""
    normalized = validate_answers(answers)
    sums = compute_sums(normalized)
    results = rank_ministries(sums)
    return {
        "answers": normalized,
        "sums": sums,
        "results": results,
        "recommended": results[0],
    }
