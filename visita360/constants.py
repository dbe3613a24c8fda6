"""Closed vocabularies shared by models, schemas and services.

Values are stored verbatim (Portuguese labels, as the field team uses them).
"""

SEGMENTOS = ("Empreiteiras", "Engenharias", "Arquitetura", "Particular", "Condomínio")
RESPONSAVEIS = ("Eng Civil", "Mestre de Obras", "Arquiteto", "Outros", "Síndico", "Zelador")
ESTAGIOS = ("Inicial", "Intermediário", "Final", "Reforma")
CLASSIFICACOES = ("Forte", "Médio", "Fraco")

STATUS_RETORNOU = "Retornou"
STATUS_FECHOU = "Fechou pedido"
STATUS_ORCAMENTO = "Orçamento"
STATUS_CONSULTA = "Consulta preço"
STATUS_SEM_RETORNO = "Sem retorno"
FOLLOWUP_STATUSES = (
    STATUS_RETORNOU,
    STATUS_FECHOU,
    STATUS_ORCAMENTO,
    STATUS_CONSULTA,
    STATUS_SEM_RETORNO,
)
QUOTE_STATUSES = (STATUS_ORCAMENTO, STATUS_CONSULTA)

MOTIVOS_PERDA = (
    "Preço menor",
    "Sem retorno",
    "Produto em falta",
    "Entrega",
    "Edu não cobriu",
    "Outros",
)

# Keys of the JSON blobs kept in the app_state table
GEOCODE_CACHE_KEY = "visita360_geocode_cache"
APP_CONFIG_KEY = "visita360_config"
