"""
스케줄 트레이딩 서비스 소스 코드 (도메인 / 애플리케이션 / 인프라 계층)
"""
