"""
deployer_kit
------------

정적 웹 자산을 Cloud Run 에 배포하기 위한 운영자용 CLI 패키지.
GitHub Actions 가 사용할 배포 서비스 계정(역할 + 키)을 멱등하게 준비하고,
Cloud Build / Cloud Run 배포를 gcloud 로 실행한다.
"""

__version__ = "0.1.0"

__all__ = [
    "config",
    "provisioner",
    "deployment",
]
