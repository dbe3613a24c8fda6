"""
dashboard_service.py — Sales KPIs, chart aggregates and map points.

Everything the dashboard draws, computed from the visit and follow-up lists.
Rendering is the client's job; this returns plain numbers.

Business Rules:
- Filters: data_ini / data_fim inclusive, segmento, estagio ("all" or empty = no filter)
- Follow-ups count only when their visit passed the filters
- taxa_conversao = distinct visits with a closed deal / visits, rounded %
- pendentes = open visits whose days since last contact exceed prazo
- top_clientes: 10 companies with the highest closed value
- Reports (build_reports) are unfiltered: per vendedor, per segmento, per month

Called by: routers/dashboard.py
Depends on: followup_derivation.py, constants.py
"""

from collections import Counter
from datetime import date, datetime

from ..constants import MOTIVOS_PERDA, QUOTE_STATUSES, STATUS_FECHOU
from ..utils.normalization import validate_coordinates
from .followup_derivation import as_date, derive_followup_state, latest_followup

TOP_CLIENTES_LIMIT = 10


def _active(value) -> bool:
    return bool(value) and value != "all"


def filter_visits(
    visits,
    data_ini: date | None = None,
    data_fim: date | None = None,
    segmento: str | None = None,
    estagio: str | None = None,
) -> list:
    out = []
    for v in visits:
        d = as_date(v.data)
        if data_ini and (d is None or d < data_ini):
            continue
        if data_fim and (d is None or d > data_fim):
            continue
        if _active(segmento) and v.segmento != segmento:
            continue
        if _active(estagio) and v.estagio != estagio:
            continue
        out.append(v)
    return out


def _valor(fu) -> float:
    return float(fu.valor) if fu.valor is not None else 0.0


def build_dashboard(visits, followups, prazo_days: int, now: datetime, **filters) -> dict:
    visitas = filter_visits(visits, **filters)
    ids = {v.id for v in visitas}
    fus = [fu for fu in followups if fu.visita_id in ids]
    fechados = [fu for fu in fus if fu.status == STATUS_FECHOU]
    visitas_fechadas = {fu.visita_id for fu in fechados}

    total = len(visitas)
    pendentes = 0
    for v in visitas:
        state = derive_followup_state(v, fus, now)
        if state and not state.is_closed and state.days_since_base > prazo_days:
            pendentes += 1

    empresa_by_id = {v.id: v.empresa for v in visits}
    valor_por_cliente: dict[str, float] = {}
    for fu in fechados:
        empresa = empresa_by_id.get(fu.visita_id) or f"#{fu.visita_id}"
        valor_por_cliente[empresa] = valor_por_cliente.get(empresa, 0.0) + _valor(fu)
    top = sorted(valor_por_cliente.items(), key=lambda kv: kv[1], reverse=True)[:TOP_CLIENTES_LIMIT]

    motivos = Counter(fu.motivo_perda for fu in fus if fu.motivo_perda)

    return {
        "kpis": {
            "total_visitas": total,
            "total_vendido": round(sum(_valor(fu) for fu in fechados), 2),
            "taxa_conversao": round(len(visitas_fechadas) / total * 100) if total else 0,
            "pendentes": pendentes,
        },
        "perdas": {m: motivos.get(m, 0) for m in MOTIVOS_PERDA},
        "funil": {
            "visitados": total,
            "contatados": len({fu.visita_id for fu in fus}),
            "orcamentos": len({fu.visita_id for fu in fus if fu.status in QUOTE_STATUSES}),
            "fechados": len(visitas_fechadas),
        },
        "por_segmento": dict(Counter(v.segmento for v in visitas)),
        "por_estagio": dict(Counter(v.estagio for v in visitas)),
        "top_clientes": [{"empresa": e, "valor": round(val, 2)} for e, val in top],
    }


def list_map_points(visits, followups) -> list[dict]:
    """Visits that can be placed on the map, with their latest status."""
    followups = list(followups)
    points = []
    for v in visits:
        if v.lat is None or v.lng is None or not validate_coordinates(v.lat, v.lng):
            continue
        last = latest_followup(v.id, followups)
        points.append({
            "id": v.id,
            "lat": v.lat,
            "lng": v.lng,
            "empresa": v.empresa,
            "endereco": v.endereco,
            "classificacao": v.classificacao,
            "segmento": v.segmento,
            "ultimo_status": last.status if last is not None else None,
        })
    return points


# ── Reports ──────────────────────────────────────────────────────────


def _group_stats(visits, closed_value: dict[int, float], key) -> dict[str, dict]:
    out: dict[str, dict] = {}
    for v in visits:
        row = out.setdefault(key(v), {"visitas": 0, "fechados": 0, "valor_total": 0.0})
        row["visitas"] += 1
        if v.id in closed_value:
            row["fechados"] += 1
            row["valor_total"] += closed_value[v.id]
    for row in out.values():
        row["conversao"] = round(row["fechados"] / row["visitas"] * 100)
        row["valor_total"] = round(row["valor_total"], 2)
    return out


def _month(value) -> str | None:
    d = as_date(value)
    return d.strftime("%Y-%m") if d else None


def build_reports(visits, followups) -> dict:
    """Per-salesperson, per-segment and per-month report tables.

    A visit counts as closed when any of its follow-ups is "Fechou pedido";
    its closed value is the sum of those follow-ups. Months are YYYY-MM,
    ascending.
    """
    visits = list(visits)
    closed_value: dict[int, float] = {}
    for fu in followups:
        if fu.status == STATUS_FECHOU:
            closed_value[fu.visita_id] = closed_value.get(fu.visita_id, 0.0) + _valor(fu)

    visitas_por_mes = Counter(m for m in (_month(v.data) for v in visits) if m)
    vendas_por_mes: dict[str, float] = {}
    for fu in followups:
        mes = _month(fu.data)
        if fu.status == STATUS_FECHOU and _valor(fu) and mes:
            vendas_por_mes[mes] = vendas_por_mes.get(mes, 0.0) + _valor(fu)

    return {
        "por_vendedor": _group_stats(visits, closed_value, lambda v: v.vendedor or "Sem vendedor"),
        "por_segmento": _group_stats(visits, closed_value, lambda v: v.segmento),
        "visitas_por_mes": dict(sorted(visitas_por_mes.items())),
        "vendas_por_mes": {m: round(val, 2) for m, val in sorted(vendas_por_mes.items())},
    }
