"""
User-facing messages (pt-BR), kept in one place so the dashboard, the API and
the orchestrator report the same wording.
"""

EMPTY_COMPETITORS = "Por favor, insira pelo menos um concorrente."
NAME_TOO_SHORT = "Deve ter pelo menos 3 caracteres."
NAME_INVALID_CHARS = "Nome contém caracteres inválidos."
FORM_HAS_ERRORS = "Corrija os nomes destacados antes de continuar."
ANALYSIS_IN_PROGRESS = "Uma análise já está em andamento."
GENERATION_FAILED = (
    "Ocorreu um erro ao gerar o relatório. "
    "Por favor, verifique sua chave de API e tente novamente."
)

CONFIRM_CLEAR_HISTORY = (
    "Tem certeza de que deseja limpar todo o histórico de análises? "
    "Esta ação não pode ser desfeita."
)
CONFIRM_MUTE = "Desativar a narração do briefing?"

SPEECH_FAILED = "Falha ao gerar o áudio."
IMAGE_EDIT_FAILED = "Falha ao editar a imagem."
VIDEO_START_FAILED = "Falha ao iniciar a geração do vídeo."
VIDEO_POLL_FAILED = "Erro ao verificar o status da geração de vídeo."
VIDEO_EMPTY = "A geração de vídeo foi concluída, mas nenhum vídeo foi retornado."
TRANSCRIPTION_FAILED = "Falha ao transcrever o áudio."
