"""
infrastructure.rag.document_index - Knowledge index behind the retrieval tool.

Adapted from the RAG base class: same FAISS + HuggingFace embeddings
lifecycle (load if present, otherwise ingest and build, merge on add), but
it only retrieves. Ranking is the vector store's; this module applies the
permission filter and hands back the top-K passages.

Public surface mirrors the collaborator contract the agent is built on:

    index = get_data_source(settings)
    engine = index.as_query_engine(similarity_top_k=3, pre_filters=generate_filters(ids))
    passages = await engine.query("what is our refund policy?")
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from langchain_core.documents import Document
from langchain_core.vectorstores import VectorStore

from domain.exceptions import RetrievalError
from domain.models import Passage
from infrastructure.config import Settings
from infrastructure.rag.filters import DOC_ID_KEY, PRIVATE_KEY, PermissionFilter

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".txt", ".md", ".pdf")

# Candidates fetched per requested passage before permission filtering.
FETCH_MULTIPLIER = 10
MIN_FETCH_K = 20


class QueryEngine:
    """Top-K retrieval over a vector store, scoped by a permission filter."""

    def __init__(
        self,
        vectorstore: Optional[VectorStore],
        similarity_top_k: int,
        pre_filters: PermissionFilter,
    ):
        if similarity_top_k < 1:
            raise ValueError("similarity_top_k must be >= 1")
        self._vectorstore = vectorstore
        self._top_k = similarity_top_k
        self._filter = pre_filters

    @property
    def similarity_top_k(self) -> int:
        return self._top_k

    @property
    def filters(self) -> PermissionFilter:
        return self._filter

    async def query(self, text: str) -> list[Passage]:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.retrieve, text)

    def retrieve(self, text: str) -> list[Passage]:
        """Synchronous retrieval (runs in thread pool from query())."""
        if self._vectorstore is None:
            raise RetrievalError("Document index is empty or not initialized")
        # Widen the candidate window until top_k passages pass the filter
        # or the store has nothing more to return.
        fetch_k = max(self._top_k * FETCH_MULTIPLIER, MIN_FETCH_K)
        while True:
            try:
                scored = self._vectorstore.similarity_search_with_score(text, k=fetch_k)
            except Exception as e:
                raise RetrievalError(f"Vector search failed: {e}") from e

            passages = self._allowed(scored)
            if len(passages) >= self._top_k or len(scored) < fetch_k:
                break
            fetch_k *= 2

        logger.debug(
            "Retrieved %d/%d passage(s) for query: %s", len(passages), len(scored), text[:80],
        )
        return passages

    def _allowed(self, scored) -> list[Passage]:
        passages: list[Passage] = []
        for doc, score in scored:
            if not self._filter.allows(doc.metadata):
                continue
            passages.append(Passage(
                text=doc.page_content,
                doc_id=str(doc.metadata.get(DOC_ID_KEY, "")),
                score=float(score) if score is not None else None,
                metadata=dict(doc.metadata),
            ))
            if len(passages) >= self._top_k:
                break
        return passages


class DocumentIndex:
    """FAISS-backed document index built from a folder of documents."""

    def __init__(
        self,
        data_dir: str,
        vectorstore_path: str,
        embedding_model: str = "sentence-transformers/all-mpnet-base-v2",
        chunk_size: int = 1000,
        chunk_overlap: int = 150,
        vectorstore: Optional[VectorStore] = None,
    ):
        self.data_dir = Path(data_dir)
        self.vectorstore_path = Path(vectorstore_path)
        self.embedding_model_name = embedding_model
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

        self.embeddings = None
        self.vectorstore: Optional[VectorStore] = vectorstore

        logger.info(
            "%s instance created (data=%s, vectorstore=%s)",
            self.__class__.__name__, self.data_dir, self.vectorstore_path,
        )

    # ================================================================
    # Public API
    # ================================================================

    def initialize(self, force_rebuild: bool = False) -> None:
        """Load the index from disk, or ingest data_dir and build it."""
        if self.vectorstore is not None and not force_rebuild:
            return

        self.embeddings = self._load_embeddings()
        logger.info("Embedding model loaded")

        if not force_rebuild and self.vectorstore_path.exists():
            self._load_vectorstore()
            return

        reason = "force_rebuild=True" if force_rebuild else "no existing index"
        logger.info("Building vectorstore (%s)", reason)
        docs = self._collect_documents()
        if not docs:
            logger.warning("No documents ingested; retrieval will return nothing")
            return
        self._build_vectorstore(docs)

    def as_query_engine(
        self,
        similarity_top_k: int,
        pre_filters: PermissionFilter,
    ) -> QueryEngine:
        return QueryEngine(self.vectorstore, similarity_top_k, pre_filters)

    def add_document(self, file_path: str, doc_id: Optional[str] = None, private: bool = True) -> int:
        """Chunk a single file and merge it into the index.

        Uploaded documents are private by default: only agents whose
        document scope includes doc_id can retrieve them.
        """
        if self.embeddings is None:
            raise RuntimeError("Call initialize() before add_document()")

        path = Path(file_path).resolve()
        indexed = self._get_indexed_files()
        if str(path) in indexed:
            logger.info("File already indexed, skipping: %s", path.name)
            return 0

        doc_id = doc_id or _doc_id_for(path)
        docs = self._load_file(path, doc_id, private)
        if not docs:
            logger.warning("No chunks produced from %s", path.name)
            return 0

        self._merge_into_vectorstore(docs)
        indexed[str(path)] = {"doc_id": doc_id, "private": private}
        self._save_indexed_files(indexed)
        logger.info("Added %d chunks from %s", len(docs), path.name)
        return len(docs)

    def get_stats(self) -> dict[str, Any]:
        stats: dict[str, Any] = {
            "class": self.__class__.__name__,
            "data_dir": str(self.data_dir),
            "vectorstore_path": str(self.vectorstore_path),
            "status": "initialized" if self.vectorstore is not None else "not_initialized",
        }
        index = getattr(self.vectorstore, "index", None)
        if index is not None:
            stats["vector_count"] = index.ntotal
        return stats

    # ================================================================
    # Ingestion
    # ================================================================

    def _collect_documents(self) -> List[Document]:
        """Everything a rebuild indexes: data_dir plus previously added files.

        Added files keep the doc_id and visibility they were added with.
        Entries whose file no longer exists are dropped from the ledger.
        """
        indexed = self._get_indexed_files()
        docs = self._ingest_documents(skip=set(indexed))

        kept: Dict[str, dict] = {}
        for name, entry in indexed.items():
            path = Path(name)
            if not path.is_file():
                logger.warning("Previously added file is gone, dropping it: %s", name)
                continue
            docs.extend(self._load_file(path, entry["doc_id"], bool(entry["private"])))
            kept[name] = entry

        if kept != indexed:
            self._save_indexed_files(kept)
        return docs

    def _ingest_documents(self, skip: Optional[Set[str]] = None) -> List[Document]:
        skip = skip or set()
        if not self.data_dir.exists():
            logger.warning("Data directory does not exist: %s", self.data_dir)
            return []

        docs: List[Document] = []
        for path in sorted(self.data_dir.rglob("*")):
            if str(path.resolve()) in skip:
                continue
            if path.is_file() and path.suffix.lower() in SUPPORTED_SUFFIXES:
                docs.extend(self._load_file(path, _doc_id_for(path), private=False))
        logger.info("Ingested %d chunks from %s", len(docs), self.data_dir)
        return docs

    def _load_file(self, path: Path, doc_id: str, private: bool) -> List[Document]:
        from langchain_community.document_loaders import PyPDFLoader, TextLoader
        from langchain_text_splitters import RecursiveCharacterTextSplitter

        if path.suffix.lower() == ".pdf":
            loader = PyPDFLoader(file_path=str(path))
        else:
            loader = TextLoader(file_path=str(path), encoding="utf-8")

        try:
            raw = loader.load()
        except Exception:
            logger.exception("Failed to load %s, skipping", path)
            return []

        splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
        )
        chunks = splitter.split_documents(raw)
        for chunk in chunks:
            chunk.metadata[DOC_ID_KEY] = doc_id
            chunk.metadata[PRIVATE_KEY] = "true" if private else "false"
            chunk.metadata.setdefault("file_name", path.name)
        return chunks

    # ================================================================
    # Vectorstore management
    # ================================================================

    def _load_embeddings(self):
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(
            model_name=self.embedding_model_name,
            encode_kwargs={"normalize_embeddings": True},
        )

    def _build_vectorstore(self, documents: List[Document]) -> None:
        from langchain_community.vectorstores import FAISS
        from langchain_community.vectorstores.faiss import DistanceStrategy

        logger.info("Creating FAISS index from %d documents", len(documents))
        self.vectorstore = FAISS.from_documents(
            documents=documents,
            embedding=self.embeddings,
            distance_strategy=DistanceStrategy.COSINE,
        )
        self.vectorstore_path.parent.mkdir(parents=True, exist_ok=True)
        self.vectorstore.save_local(str(self.vectorstore_path))
        logger.info("Vectorstore saved to %s", self.vectorstore_path)

    def _load_vectorstore(self) -> None:
        from langchain_community.vectorstores import FAISS

        logger.info("Loading vectorstore from %s", self.vectorstore_path)
        try:
            self.vectorstore = FAISS.load_local(
                folder_path=str(self.vectorstore_path),
                embeddings=self.embeddings,
                allow_dangerous_deserialization=True,
            )
        except Exception as e:
            raise RetrievalError(f"Failed to load vectorstore at {self.vectorstore_path}: {e}") from e
        logger.info("Vectorstore loaded (%d vectors)", self.vectorstore.index.ntotal)

    def _merge_into_vectorstore(self, documents: List[Document]) -> None:
        from langchain_community.vectorstores import FAISS
        from langchain_community.vectorstores.faiss import DistanceStrategy

        new_store = FAISS.from_documents(
            documents=documents,
            embedding=self.embeddings,
            distance_strategy=DistanceStrategy.COSINE,
        )
        if self.vectorstore is None:
            self.vectorstore = new_store
        else:
            self.vectorstore.merge_from(new_store)

        self.vectorstore_path.parent.mkdir(parents=True, exist_ok=True)
        self.vectorstore.save_local(str(self.vectorstore_path))

    # ================================================================
    # Indexed file tracking
    # ================================================================

    def _index_meta_path(self) -> Path:
        return self.vectorstore_path.parent / f"{self.vectorstore_path.name}_indexed.json"

    def _get_indexed_files(self) -> Dict[str, dict]:
        """Added files keyed by resolved path, with their doc_id and visibility."""
        meta_path = self._index_meta_path()
        if not meta_path.exists():
            return {}
        with open(meta_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return dict(data.get("files", {}))

    def _save_indexed_files(self, files: Dict[str, dict]) -> None:
        meta_path = self._index_meta_path()
        meta_path.parent.mkdir(parents=True, exist_ok=True)
        with open(meta_path, "w", encoding="utf-8") as f:
            json.dump({"files": dict(sorted(files.items()))}, f, indent=2)


def _doc_id_for(path: Path) -> str:
    """Stable document id derived from the file name and contents."""
    digest = hashlib.sha1(path.read_bytes()).hexdigest()[:12]
    return f"{path.stem}-{digest}"


def build_document_index(settings: Settings) -> DocumentIndex:
    """Document index described by settings, not yet loaded."""
    return DocumentIndex(
        data_dir=str(settings.data_dir),
        vectorstore_path=str(settings.vectorstore_path),
        embedding_model=settings.embedding_model,
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
    )


def get_data_source(settings: Settings, force_rebuild: bool = False) -> DocumentIndex:
    """Build and initialize the document index described by settings."""
    index = build_document_index(settings)
    index.initialize(force_rebuild=force_rebuild)
    return index
