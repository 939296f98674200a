"""Servicio de generación de reportes PDF con reportlab."""
from datetime import datetime, timedelta, timezone
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    KeepTogether,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from app.core.config import settings
from app.services.legajo import ResumenLegajo

# ── Colores institucionales ───────────────────────────────────────────
NAVY = colors.HexColor("#1B2A4A")
GRAY = colors.HexColor("#6B7280")
GRAY_LIGHT = colors.HexColor("#F3F4F6")

# ── Zona horaria ──────────────────────────────────────────────────────
GMT_MINUS_3 = timezone(timedelta(hours=-3))

# ── Márgenes y medidas de página ──────────────────────────────────────
_LEFT_MARGIN = 0.75 * inch
_RIGHT_MARGIN = 0.75 * inch
_BOTTOM_MARGIN = 0.5 * inch
# topMargin alto para dejar espacio al header dibujado en canvas
_TOP_MARGIN = 1.4 * inch

ESTADOS_LEGIBLES = {
    "cursando": "Cursando",
    "acreditada": "Acreditada",
    "libre": "Libre",
    "regular": "Regular",
}


# ── Canvas: header en cada página ─────────────────────────────────────

def _make_page_callback(titulo_reporte: str):
    """Retorna una función que dibuja el header institucional y el número de página."""

    def _dibujar_pagina(canvas, doc):
        canvas.saveState()

        page_width, page_height = A4
        left_x = _LEFT_MARGIN
        right_x = page_width - _RIGHT_MARGIN
        top_y = page_height - 0.5 * inch

        canvas.setFont("Helvetica-Bold", 8)
        canvas.setFillColor(NAVY)
        canvas.drawRightString(right_x, top_y, settings.app_name.upper())

        # ── Línea separadora ──────────────────────────────────────
        sep_y = top_y - 8
        canvas.setStrokeColor(NAVY)
        canvas.setLineWidth(1.5)
        canvas.line(left_x, sep_y, right_x, sep_y)

        # ── Título del reporte (centrado, bajo la línea) ──────────
        canvas.setFont("Helvetica-Bold", 15)
        canvas.drawCentredString(page_width / 2, sep_y - 24, titulo_reporte)

        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(GRAY)
        canvas.drawRightString(right_x, 0.3 * inch, f"Página {doc.page}")

        canvas.restoreState()

    return _dibujar_pagina


def _encabezado(subtitulo: str = "", usuario_nombre: str = "") -> list:
    """Subtítulo, fecha de generación y usuario como flowables."""
    estilos = getSampleStyleSheet()
    elementos = []

    if subtitulo:
        estilo_sub = ParagraphStyle(
            "SubtituloReporte",
            parent=estilos["Normal"],
            fontSize=10,
            leading=14,
            textColor=GRAY,
            spaceAfter=6,
        )
        elementos.append(Paragraph(subtitulo, estilo_sub))

    estilo_meta = ParagraphStyle(
        "MetaReporte",
        parent=estilos["Normal"],
        fontSize=9,
        leading=14,
        textColor=GRAY,
        spaceAfter=3,
    )
    fecha = datetime.now(GMT_MINUS_3).strftime("%d/%m/%Y %H:%M GMT-3")
    elementos.append(Paragraph(f"Generado: {fecha}", estilo_meta))
    if usuario_nombre:
        elementos.append(Paragraph(f"Generado por: {usuario_nombre}", estilo_meta))
    elementos.append(Spacer(1, 0.25 * inch))

    return elementos


def _tabla(headers: list[str], rows: list[list], col_widths=None) -> Table:
    """Crea una tabla con estilo institucional."""
    data = [headers] + rows
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), NAVY),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 9),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
        ("TOPPADDING", (0, 0), (-1, 0), 8),
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 1), (-1, -1), 8),
        ("BOTTOMPADDING", (0, 1), (-1, -1), 6),
        ("TOPPADDING", (0, 1), (-1, -1), 6),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#D1D5DB")),
        *[
            ("BACKGROUND", (0, i), (-1, i), GRAY_LIGHT)
            for i in range(2, len(data), 2)
        ],
        ("ALIGN", (0, 0), (-1, -1), "LEFT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]))
    return table


def _seccion_titulo(texto: str) -> Paragraph:
    """Título de sección dentro del reporte."""
    estilo = ParagraphStyle(
        "SeccionTitulo",
        fontSize=12,
        textColor=NAVY,
        fontName="Helvetica-Bold",
        spaceBefore=6,
        spaceAfter=10,
    )
    return Paragraph(texto, estilo)


def _nuevo_doc(buf: BytesIO) -> SimpleDocTemplate:
    """Crea un SimpleDocTemplate con los márgenes institucionales."""
    return SimpleDocTemplate(
        buf,
        pagesize=A4,
        topMargin=_TOP_MARGIN,
        bottomMargin=_BOTTOM_MARGIN,
        leftMargin=_LEFT_MARGIN,
        rightMargin=_RIGHT_MARGIN,
    )


def _fecha(valor: datetime | None) -> str:
    return valor.strftime("%d/%m/%Y") if valor else "-"


# ═════════════════════════════════════════════════════════════════════
# Generadores
# ═════════════════════════════════════════════════════════════════════

def generar_legajo(
    estudiante: dict,
    resumen: ResumenLegajo,
    usuario_nombre: str = "",
) -> bytes:
    """Legajo estudiantil: datos, avance en la carrera y materias por año."""
    titulo = "Legajo Estudiantil"
    buf = BytesIO()
    doc = _nuevo_doc(buf)
    page_cb = _make_page_callback(titulo)
    elementos = _encabezado(
        f"{estudiante.get('nombre_completo', '')} - Legajo {estudiante.get('legajo', '')}",
        usuario_nombre,
    )

    datos_rows = [
        ["Legajo", estudiante.get("legajo", "")],
        ["Nombre", estudiante.get("nombre_completo", "")],
        ["Carrera", estudiante.get("carrera", "")],
        ["Fecha de inscripción", _fecha(estudiante.get("fecha_inscripcion"))],
        ["Estado", estudiante.get("estado", "")],
    ]
    avance_rows = [
        ["Materias acreditadas", f"{resumen.acreditadas} de {resumen.total_materias}"],
        ["Avance", f"{resumen.porcentaje}%"],
        ["Promedio general", f"{resumen.promedio:.1f}"],
    ]
    elementos.append(KeepTogether([
        _seccion_titulo("Datos del Estudiante"),
        _tabla(["Campo", "Valor"], datos_rows, col_widths=[2.5 * inch, 4 * inch]),
    ]))
    elementos.append(Spacer(1, 0.2 * inch))
    elementos.append(KeepTogether([
        _seccion_titulo("Avance Académico"),
        _tabla(["Indicador", "Valor"], avance_rows, col_widths=[2.5 * inch, 4 * inch]),
    ]))
    elementos.append(Spacer(1, 0.2 * inch))

    if not resumen.materias:
        elementos.append(_seccion_titulo("Materias"))
        elementos.append(Paragraph("Sin materias registradas.", getSampleStyleSheet()["Normal"]))
    else:
        anios = sorted({f.materia.anio for f in resumen.materias})
        for anio in anios:
            rows = [
                [
                    f.materia.codigo,
                    f.materia.nombre,
                    ESTADOS_LEGIBLES.get(f.registro.estado, f.registro.estado),
                    str(f.registro.nota) if f.registro.nota is not None else "-",
                    _fecha(f.registro.fecha),
                    f"{f.registro.libro or '-'} / {f.registro.folio or '-'}",
                ]
                for f in resumen.materias
                if f.materia.anio == anio
            ]
            elementos.append(KeepTogether([
                _seccion_titulo(f"{anio}° Año"),
                _tabla(["Código", "Materia", "Estado", "Nota", "Fecha", "Libro / Folio"], rows),
            ]))
            elementos.append(Spacer(1, 0.15 * inch))

    doc.build(elementos, onFirstPage=page_cb, onLaterPages=page_cb)
    return buf.getvalue()


def generar_plan_estudios(
    carrera: dict,
    materias: list[dict],
    usuario_nombre: str = "",
) -> bytes:
    """Plan de estudios de una carrera: materias por año con sus correlativas."""
    titulo = f"Plan de Estudios: {carrera.get('nombre', '')}"
    buf = BytesIO()
    doc = _nuevo_doc(buf)
    page_cb = _make_page_callback(titulo)
    elementos = _encabezado(
        f"Duración: {carrera.get('duracion_anios', '')} años - {len(materias)} materia(s)",
        usuario_nombre,
    )

    if not materias:
        elementos.append(Paragraph("La carrera no tiene materias cargadas.", getSampleStyleSheet()["Normal"]))
    else:
        for anio in sorted({m.get("anio") for m in materias}):
            rows = [
                [
                    m.get("codigo", ""),
                    m.get("nombre", ""),
                    str(m.get("horas", "")),
                    ", ".join(m.get("correlativas", [])) or "-",
                ]
                for m in materias
                if m.get("anio") == anio
            ]
            elementos.append(KeepTogether([
                _seccion_titulo(f"{anio}° Año"),
                _tabla(["Código", "Materia", "Horas", "Correlativas"], rows),
            ]))
            elementos.append(Spacer(1, 0.15 * inch))

    doc.build(elementos, onFirstPage=page_cb, onLaterPages=page_cb)
    return buf.getvalue()
