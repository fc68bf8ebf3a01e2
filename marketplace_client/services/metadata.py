"""요청 메타 파라미터

클라이언트/제품 식별 정보를 모든 요청에 query parameter로 붙입니다.
OS/런타임 정보 수집은 호출 측에서 `extra`로 넘깁니다.
"""

from typing import Mapping, Optional

from marketplace_client.core.config import Settings, settings as default_settings


META_PARAM_CLIENT = "client"
META_PARAM_CLIENT_VERSION = "client.version"
META_PARAM_WS = "ws"
META_PARAM_OS = "os"
META_PARAM_NL = "nl"
META_PARAM_JAVA_VERSION = "java.version"
META_PARAM_RUNTIME_VERSION = "runtime.version"
META_PARAM_PLATFORM_VERSION = "platform.version"
META_PARAM_PRODUCT = "product"
META_PARAM_PRODUCT_VERSION = "product.version"

META_PARAM_KEYS = (
    META_PARAM_CLIENT,
    META_PARAM_CLIENT_VERSION,
    META_PARAM_OS,
    META_PARAM_WS,
    META_PARAM_NL,
    META_PARAM_JAVA_VERSION,
    META_PARAM_RUNTIME_VERSION,
    META_PARAM_PLATFORM_VERSION,
    META_PARAM_PRODUCT,
    META_PARAM_PRODUCT_VERSION,
)


class SettingsMetadataProvider:
    """설정값 기반 메타 파라미터 제공자

    client/product 키는 설정에서, 나머지 키는 `extra`에서 채웁니다.
    값이 비어 있는 키는 보내지 않습니다.
    """

    def __init__(self, settings: Optional[Settings] = None, extra: Optional[Mapping[str, str]] = None):
        self.settings = settings or default_settings
        self.extra = dict(extra or {})

    def get_meta_parameters(self) -> dict[str, str]:
        params: dict[str, Optional[str]] = {
            META_PARAM_CLIENT: self.settings.client_id,
            META_PARAM_CLIENT_VERSION: self.settings.client_version,
            META_PARAM_PRODUCT: self.settings.product_id,
            META_PARAM_PRODUCT_VERSION: self.settings.product_version,
        }
        params.update(self.extra)
        return {key: value for key, value in params.items() if value}
