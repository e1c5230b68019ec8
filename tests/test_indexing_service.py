from company_brain.domain.models import (
    BrainDocument,
    ContentType,
    EmbeddingScope,
    ProjectDocument,
    ProjectMetadata,
)


def _by_type(repo, scope, content_type):
    return [r for r in repo.records(scope) if r.content_type is content_type]


async def test_company_info_and_additional_context(indexer, embedding_repo, acme_brain):
    report = await indexer.index_company_info(acme_brain)

    assert report.ok
    info = _by_type(embedding_repo, EmbeddingScope.COMPANY, ContentType.COMPANY_INFO)
    assert len(info) == 1
    assert info[0].content_id == "brain-acme"
    assert info[0].metadata["company_name"] == "Acme"

    chunks = _by_type(embedding_repo, EmbeddingScope.COMPANY, ContentType.ADDITIONAL_CONTEXT)
    assert len(chunks) == 1
    assert chunks[0].content == acme_brain.additional_context
    assert chunks[0].metadata["total_chunks"] == 1
    assert report.stored == 2


async def test_clearing_additional_context_removes_chunks(indexer, embedding_repo, acme_brain):
    await indexer.index_company_info(acme_brain)
    acme_brain.additional_context = None
    await indexer.index_company_info(acme_brain)

    assert _by_type(embedding_repo, EmbeddingScope.COMPANY, ContentType.ADDITIONAL_CONTEXT) == []
    assert len(_by_type(embedding_repo, EmbeddingScope.COMPANY, ContentType.COMPANY_INFO)) == 1


async def test_embedding_failure_becomes_warning(indexer, fake_client, embedding_repo, acme_brain):
    fake_client.fail_with()

    report = await indexer.index_company_info(acme_brain)

    assert not report.ok
    assert len(report.warnings) == 2
    assert report.warnings[0].startswith("company_info:")
    assert await embedding_repo.count(EmbeddingScope.COMPANY) == 0


async def test_project_metadata_and_documents(indexer, embedding_repo, website_project):
    metadata = ProjectMetadata(id="m1", project_id="proj-web", tenant_id="tenant-acme", domain="Marketing")
    doc = ProjectDocument(
        id="pdoc-1", project_id="proj-web", tenant_id="tenant-acme", file_name="brief.docx", file_type="docx"
    )

    await indexer.index_project_metadata(metadata, website_project)
    await indexer.index_project_metadata(metadata, website_project)
    await indexer.index_project_document(doc, website_project)

    records = embedding_repo.records(EmbeddingScope.PROJECT)
    assert sorted(r.content_type.value for r in records) == ["document", "project_metadata"]
    meta = _by_type(embedding_repo, EmbeddingScope.PROJECT, ContentType.PROJECT_METADATA)[0]
    assert meta.content_id == "proj-web"
    assert meta.content.startswith("Project: Website Relaunch")
    document = _by_type(embedding_repo, EmbeddingScope.PROJECT, ContentType.DOCUMENT)[0]
    assert document.metadata["project_name"] == "Website Relaunch"


async def test_deleted_document_is_removed(indexer, embedding_repo):
    doc = BrainDocument(id="d1", tenant_id="tenant-acme", file_name="a.pdf", file_type="pdf")
    await indexer.index_company_document(doc)
    assert await embedding_repo.count(EmbeddingScope.COMPANY) == 1

    report = await indexer.index_company_document(doc.model_copy(update={"is_deleted": True}))
    assert report.removed == 1
    assert await embedding_repo.count(EmbeddingScope.COMPANY) == 0


async def test_document_text_chunks(indexer, embedding_repo, website_project):
    doc = ProjectDocument(
        id="pdoc-1", project_id="proj-web", tenant_id="tenant-acme", file_name="brief.docx", file_type="docx"
    )
    text = "\n\n".join(f"Paragraph {i} " + "words " * 30 for i in range(4))

    report = await indexer.index_document_text(doc, text, website_project)

    chunks = _by_type(embedding_repo, EmbeddingScope.PROJECT, ContentType.DOCUMENT_CHUNK)
    assert report.stored == len(chunks) > 1
    assert "\n\n".join(c.content for c in sorted(chunks, key=lambda c: c.metadata["chunk_index"])) == text

    await indexer.remove_document(EmbeddingScope.PROJECT, "pdoc-1")
    assert await embedding_repo.count(EmbeddingScope.PROJECT) == 0


async def test_remove_project_and_clear_content_type(indexer, embedding_repo, website_project, acme_brain):
    metadata = ProjectMetadata(id="m1", project_id="proj-web", tenant_id="tenant-acme", domain="Marketing")
    await indexer.index_project_metadata(metadata, website_project)
    await indexer.index_company_info(acme_brain)

    assert (await indexer.remove_project("tenant-acme", "proj-web")).removed == 1
    assert (await indexer.clear_content_type("tenant-acme", ContentType.ADDITIONAL_CONTEXT)).removed == 1
    assert [r.content_type for r in embedding_repo.records(EmbeddingScope.COMPANY)] == [ContentType.COMPANY_INFO]
