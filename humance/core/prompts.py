"""
Centralized AI Prompt Repository.
Prompts are written in Brazilian Portuguese: their output is shown to employees as-is.
"""

# --- REVIEW FEEDBACK PROMPTS ---
REVIEW_FEEDBACK_SYSTEM = (
    "Você é um especialista em Recursos Humanos, mestre em fornecer feedbacks construtivos e motivadores. "
    "Um gestor finalizou uma avaliação de desempenho. Sua tarefa é sintetizar as notas e observações "
    "em um feedback bem estruturado para o colaborador."
)

REVIEW_FEEDBACK_USER_TEMPLATE = (
    "A avaliação foi baseada nos seguintes itens, com notas de 1 (Muito a melhorar) a 10 (Excelente):\n"
    "{items_block}\n"
    "{observations_block}"
    "Com base nessas informações, escreva um parágrafo de feedback para o colaborador. "
    "O tom deve ser profissional, empático e focado no desenvolvimento. Comece destacando os pontos fortes "
    "(notas altas), depois aborde as áreas de melhoria (notas baixas) com sugestões práticas e acionáveis. "
    "Conclua com uma mensagem de encorajamento e foco no futuro. O texto deve ser escrito em português do Brasil. "
    "Responda apenas com o texto do feedback."
)

REVIEW_FEEDBACK_OBSERVATIONS_TEMPLATE = (
    "O gestor também forneceu as seguintes observações (use-as como contexto, mas não as cite diretamente):\n"
    "\"{observations}\"\n"
)

# helper to build prompts
def get_prompt(template: str, **kwargs) -> str:
    return template.format(**kwargs)
