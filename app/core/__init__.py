"""공통 인프라: 설정, 저장소 세션, 예외, 로깅, 보안"""
