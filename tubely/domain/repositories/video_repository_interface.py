# tubely/domain/repositories/video_repository_interface.py
from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from tubely.domain.models.video import VideoRecord


class IVideoRepository(ABC):
    """Contrato para persistência de vídeos"""

    @abstractmethod
    def put(self, record: VideoRecord) -> None:
        """Insere um novo vídeo"""

    @abstractmethod
    def get(self, video_id: UUID) -> Optional[VideoRecord]:
        """Busca um vídeo pelo ID"""

    @abstractmethod
    def update(self, record: VideoRecord) -> VideoRecord:
        """Grava o registro inteiro e devolve a versão persistida"""

    @abstractmethod
    def list_by_user(self, user_id: UUID) -> List[VideoRecord]:
        """Lista os vídeos de um usuário"""

    @abstractmethod
    def delete(self, video_id: UUID) -> None:
        """Remove um vídeo"""
