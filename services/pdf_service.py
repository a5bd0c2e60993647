import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config.settings import settings
from schemas.report_card import ReportCard
from services.report_card import format_fr

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class PDFService:
    """성적표(bulletin) HTML/PDF 렌더링"""

    def __init__(self, template_dir: Optional[str] = None):
        # 템플릿 환경 설정
        self.template_dir = Path(template_dir or settings.TEMPLATE_DIR)
        if not self.template_dir.is_absolute():
            # 실행 위치와 무관하게 프로젝트 루트 기준으로 해석
            self.template_dir = PROJECT_ROOT / self.template_dir
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=select_autoescape(["html"]),
        )
        self.env.filters["fr"] = format_fr

    def _render_template(self, template_name: str, data: Dict[str, Any]) -> str:
        """템플릿을 렌더링하여 HTML 생성"""
        template = self.env.get_template(template_name)
        return template.render(**data)

    def _html_to_pdf(self, html_content: str) -> bytes:
        """HTML을 PDF로 변환"""
        # weasyprint는 시스템 라이브러리(pango)가 필요해서 PDF 생성 시점에만 로드
        import weasyprint

        return weasyprint.HTML(string=html_content, base_url=str(self.template_dir)).write_pdf()

    def render_bulletins_html(
        self,
        cards: Sequence[ReportCard],
        school: Optional[Dict[str, Any]] = None,
        period: str = "1er Trimestre",
    ) -> str:
        """성적표 여러 장을 한 문서로 (페이지 나눔 포함)"""
        return self._render_template(
            "bulletin.html",
            {"cards": list(cards), "school": school or {}, "period": period},
        )

    def generate_bulletin_pdf(
        self,
        cards: Sequence[ReportCard],
        school: Optional[Dict[str, Any]] = None,
        period: str = "1er Trimestre",
    ) -> bytes:
        html = self.render_bulletins_html(cards, school, period)
        logger.info("rendering %d bulletin(s) to PDF", len(cards))
        return self._html_to_pdf(html)
