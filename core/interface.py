from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Dict, Optional

from core.config import CodebaseConfig
from core.entities import Artifact, BuildFile, DependencyIssue, Enterprise, GeneratedCodebase, Module, System


class IGraphAnalyzer(ABC):
    """Port: Dependency graph topology analysis"""

    @abstractmethod
    def find_cycles(self, artifacts: List[Artifact], limit: int = 100) -> List[List[str]]:
        pass

    @abstractmethod
    def find_dangling_references(self, artifacts: List[Artifact]) -> Dict[str, List[str]]:
        pass

    @abstractmethod
    def calculate_max_depth(self, artifacts: List[Artifact]) -> int:
        pass

    @abstractmethod
    def calculate_in_degree(self, artifacts: List[Artifact]) -> Dict[str, int]:
        pass


class IBuildFileGenerator(ABC):
    """Port: Build-system specific file emission"""

    @abstractmethod
    def generate(self, artifacts: List[Artifact], project_name: str) -> List[BuildFile]:
        pass


class ISbomExporter(ABC):
    """Port: Software Bill of Materials serialization"""

    @abstractmethod
    def export(
        self,
        config: CodebaseConfig,
        enterprise: Enterprise,
        artifacts: List[Artifact],
        modules: List[Module],
        issues: List[DependencyIssue],
        timestamp: datetime,
        serial_number: str
    ) -> Dict:
        pass


class IGraphExporter(ABC):
    """Port: Graph-interchange formats (DOT, GEXF)"""

    file_name: str = ""

    @abstractmethod
    def export(self, project_name: str, systems: List[System], artifacts: List[Artifact]) -> str:
        pass


class IRepository(ABC):
    """Port: Generation run persistence"""

    @abstractmethod
    def save_run(self, codebase: GeneratedCodebase, config: CodebaseConfig) -> str:
        pass

    @abstractmethod
    def get_run(self, run_id: str) -> Optional[Dict]:
        pass

    @abstractmethod
    def get_sbom(self, run_id: str) -> Optional[Dict]:
        pass

    @abstractmethod
    def list_runs(self, limit: int = 10) -> List[Dict]:
        pass
