"""
App layer: HTTP 서버 (FastAPI).

역할:
- 요청 → TemplateManager 호출, 에러 → HTTP 상태 코드
- 비즈니스 규칙 없음 (templates/에 위임)
"""
