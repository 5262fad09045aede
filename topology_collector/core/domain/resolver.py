"""
Разрешение соседа в устройство из реестра.

Сосед сообщает своё имя (часто FQDN) и иногда адрес управления.
Порядок поиска (первый непустой результат побеждает):
1. hostname/name == имя соседа (без учёта регистра)
2. hostname/name == короткое имя (до первой точки)
3. hostname/name содержит короткое имя
4. ip_address == IP соседа

Локальное устройство кандидатом не бывает.
Несколько кандидатов — берётся первый по порядку регистрации,
в лог пишется предупреждение со списком кандидатов.
"""

from typing import List, Optional

from ..device import Device
from ..logging import get_logger

logger = get_logger(__name__)


def short_name(name: str) -> str:
    """sw-dist-01.domain.local → sw-dist-01"""
    return name.strip().split(".", 1)[0]


class NeighborResolver:
    """
    Поиск устройства по имени/IP соседа.

    Attributes:
        devices: Источник кандидатов (DeviceRepository или совместимый объект
                 с find_by_name / find_by_name_fragment / find_by_ip)
    """

    def __init__(self, devices):
        self.devices = devices

    def candidates(
        self,
        remote_name: Optional[str],
        remote_ip: Optional[str] = None,
        local_device_id: Optional[str] = None,
    ) -> List[Device]:
        """Кандидаты первого сработавшего шага (в порядке регистрации)."""
        name = (remote_name or "").strip()
        if name:
            found = self.devices.find_by_name(name, exclude_id=local_device_id)
            if found:
                return found

            short = short_name(name)
            if short and short.lower() != name.lower():
                found = self.devices.find_by_name(short, exclude_id=local_device_id)
                if found:
                    return found

            if short:
                found = self.devices.find_by_name_fragment(short, exclude_id=local_device_id)
                if found:
                    return found

        if remote_ip:
            return self.devices.find_by_ip(remote_ip.strip(), exclude_id=local_device_id)
        return []

    def resolve(
        self,
        remote_name: Optional[str],
        remote_ip: Optional[str] = None,
        local_device_id: Optional[str] = None,
    ) -> Optional[Device]:
        """
        Устройство из реестра или None.

        Args:
            remote_name: Имя соседа как он его сообщил
            remote_ip: Адрес управления соседа
            local_device_id: Устройство, с которого виден сосед
        """
        found = self.candidates(remote_name, remote_ip, local_device_id)
        if not found:
            return None

        chosen = found[0]
        if len(found) > 1:
            logger.warning(
                f"Неоднозначное имя соседа '{remote_name or remote_ip}': "
                f"кандидаты {', '.join(d.display_name for d in found)}; выбран {chosen.display_name}",
                device=local_device_id,
            )
        return chosen
