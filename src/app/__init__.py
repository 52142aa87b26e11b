"""
App layer: 템플릿 서빙 서버 (FastAPI).

역할:
- 시작 시 컬렉션 생성, 요청마다 조회 + 렌더링
- ⚠️ 변경 감지/락 로직 없음 (templates에 위임)
"""
