"""Request helpers shared by the API tests."""
PDF_BYTES = b"%PDF-1.4\n% test document\n"


def upload(
    client,
    headers,
    title="Exam Rules",
    file_name="exam_rules.pdf",
    contents=PDF_BYTES,
    mime="application/pdf",
    **fields,
):
    """Multipart POST /documents."""
    data = {"title": title, **{k: str(v) for k, v in fields.items()}}
    return client.post("/documents", headers=headers, data=data, files={"file": (file_name, contents, mime)})
