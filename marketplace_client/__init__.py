"""Marketplace catalog client.

검색/분류 탐색, 큐레이션 목록, 사용자 즐겨찾기, 설치 결과 리포트를 담당하는
마켓플레이스 카탈로그 클라이언트입니다.
"""

__version__ = "1.0.0"
