"""
Archetype composers — assemble fragments into one complete handler.

Every composer produces the same skeleton and differs only in the
handler body:

    Header → Imports → ConnectionSetup → [RouteConfig] → Handler → Utilities

Selection precedence (``select_archetype``):
    --crud  >  --auth  >  resource "download"  >  resource "upload" / --multipart  >  read
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from endpoint_forge.core.models.archetype import Archetype
from endpoint_forge.core.models.entity import camel_case
from endpoint_forge.core.models.fragment import (
    Code,
    Comment,
    EarlyReturn,
    Fragment,
    Handler,
    Loop,
    MethodBranch,
    MethodSwitch,
    Payload,
    Respond,
    RouteConfig,
    Statement,
    quote,
)
from endpoint_forge.core.models.operation import (
    FilterValue,
    Include,
    Operation,
    OperationKind,
    Ref,
    lower_first,
    variable_name,
)
from endpoint_forge.core.models.request import Area, GenerationRequest
from endpoint_forge.core.models.settings import ScaffoldSettings
from endpoint_forge.core.services.generators.fragments import FragmentBuilder

logger = logging.getLogger(__name__)

CRUD_METHODS = ("GET", "POST", "PUT", "DELETE")


def select_archetype(request: GenerationRequest) -> Archetype:
    """Pick the handler shape for a request."""
    opts = request.options
    if opts.crud:
        return Archetype.CRUD
    if opts.auth:
        return Archetype.CREDENTIAL
    if request.resource == "download":
        return Archetype.DOWNLOAD
    if request.resource == "upload" or opts.multipart:
        return Archetype.UPLOAD
    return Archetype.READ


# ── Shared helpers ──────────────────────────────────────────────


def _message(text: str, **extra: str) -> Payload:
    return (("message", quote(text)), *extra.items())


def _failure(text: str) -> Payload:
    return (("success", "false"), ("message", quote(text)))


def _storage_segments(settings: ScaffoldSettings) -> str:
    return ", ".join(quote(part) for part in settings.storage_dir.split("/") if part)


def _public_url_prefix(settings: ScaffoldSettings) -> str:
    parts = [p for p in settings.storage_dir.split("/") if p]
    if parts and parts[0] == "public":
        parts = parts[1:]
    return "/" + "/".join(parts)


def _handler(
    b: FragmentBuilder,
    methods: tuple[str, ...] | str,
    body: list[Statement],
    preamble: tuple[Statement, ...] = (),
    response_type: str | None = None,
) -> Handler:
    return Handler(
        guard=b.method_guard(methods),
        body=tuple(body),
        error=b.error_handler(),
        preamble=preamble,
        setup=b.pattern.handler_setup,
        connect=b.pattern.connect,
        release=b.pattern.release,
        response_type=response_type,
    )


def _assemble(
    b: FragmentBuilder,
    handler: Handler,
    route_config: RouteConfig | None = None,
) -> list[Fragment]:
    nodes: list[Fragment] = [b.header(), b.imports(), b.connection_setup()]
    if route_config is not None:
        nodes.append(route_config)
    nodes.append(handler)
    nodes.extend(b.utilities())
    return nodes


# ── Full CRUD ───────────────────────────────────────────────────


def compose_crud(b: FragmentBuilder, settings: ScaffoldSettings) -> list[Fragment]:
    """GET lists, POST creates, PUT updates by id, DELETE removes by id."""
    resource = b.request.resource
    schema = b.catalog.for_resource(resource)
    plural = variable_name(camel_case(resource))
    label = lower_first(schema.name)
    singular = variable_name(label)
    fields = schema.writable
    # Field name → local variable, renamed when the field is a reserved word
    locals_ = {f: variable_name(f) for f in fields}
    body_fields: dict[str, FilterValue] = {f: Ref(code=v) for f, v in locals_.items()}
    by_id: dict[str, FilterValue] = {"id": Ref(code="id as string")}

    destructure: list[Statement] = []
    if fields:
        names = ", ".join(f if f == v else f"{f}: {v}" for f, v in locals_.items())
        destructure.append(Code(f"const {{ {names} }} = req.body"))

    list_branch: list[Statement] = [
        Comment(f"List {resource}"),
        b.query_operation(Operation(kind=OperationKind.FIND_MANY, entity=schema.name, bind=plural)),
        Respond(200, ((plural, plural), ("total", f"{plural}.length"))),
    ]

    create_branch: list[Statement] = [Comment(f"Create a new {label}"), *destructure]
    if schema.required:
        create_branch.append(EarlyReturn(
            condition=" || ".join(f"!{variable_name(f)}" for f in schema.required),
            status=400,
            payload=_message("Missing required fields"),
            comment="Validate required fields",
        ))
    if not fields:
        create_branch.append(Comment("Add your fields to the data payload"))
    create_branch += [
        b.query_operation(Operation(
            kind=OperationKind.CREATE, entity=schema.name, data=body_fields, bind=singular,
        )),
        Respond(201, _message(f"{label} created successfully", **{singular: singular})),
    ]

    id_guard = [
        Code("const { id } = req.query"),
        EarlyReturn(condition="!id", status=400, payload=_message(f"{label} id is required")),
    ]

    if body_fields or schema.updated_field:
        update_branch: list[Statement] = [
            Comment(f"Update {label}"),
            *id_guard,
            *destructure,
            b.query_operation(Operation(
                kind=OperationKind.UPDATE, entity=schema.name, where=by_id, data=body_fields,
                bind=singular,
            )),
            Respond(200, _message(f"{label} updated successfully", **{singular: singular})),
        ]
    else:
        # No writable fields and no update stamp: there is nothing to set
        update_branch = [
            Comment(f"{schema.name} has no updatable fields"),
            Respond(400, _message(f"{label} cannot be updated")),
        ]

    delete_branch: list[Statement] = [
        Comment(f"Delete {label}"),
        *id_guard,
        b.query_operation(Operation(kind=OperationKind.DELETE, entity=schema.name, where=by_id)),
        Respond(200, _message(f"{label} deleted successfully")),
    ]

    switch = MethodSwitch(branches=(
        MethodBranch("GET", tuple(list_branch)),
        MethodBranch("POST", tuple(create_branch)),
        MethodBranch("PUT", tuple(update_branch)),
        MethodBranch("DELETE", tuple(delete_branch)),
    ))

    handler = _handler(
        b, CRUD_METHODS, [b.identity_check(), switch], response_type="ResponseData",
    )
    return _assemble(b, handler)


# ── Credential verification ─────────────────────────────────────


@dataclass(frozen=True)
class CredentialTarget:
    """What a credential endpoint looks up, checks, and returns for one area."""

    entity: str
    key_field: str
    request_field: str
    missing_message: str
    not_found_message: str
    response_key: str
    projection: tuple[str, ...]
    secret_field: str = "password"
    active_filter: dict[str, FilterValue] = field(default_factory=dict)
    expiry_field: str | None = None
    access_log: str | None = None


CREDENTIAL_TARGETS: dict[Area, CredentialTarget] = {
    Area.GALLERY: CredentialTarget(
        entity="Gallery",
        key_field="slug",
        request_field="gallerySlug",
        missing_message="Gallery slug and password are required",
        not_found_message="Gallery not found or inactive",
        response_key="gallery",
        projection=("id", "title", "slug", "clientName", "eventType", "eventDate", "downloadLimit"),
        active_filter={"isActive": True},
        expiry_field="expiryDate",
        access_log="GalleryAccess",
    ),
    Area.ADMIN: CredentialTarget(
        entity="User",
        key_field="email",
        request_field="email",
        missing_message="Email and password are required",
        not_found_message="User not found",
        response_key="user",
        projection=("id", "name", "email"),
    ),
}


def compose_credential(b: FragmentBuilder, settings: ScaffoldSettings) -> list[Fragment]:
    """POST: look up by unique key, check eligibility, compare the hash."""
    target = CREDENTIAL_TARGETS[b.request.area]
    schema = b.catalog.get(target.entity)
    var = target.response_key
    # Only public fields may leave the handler; secrets are dropped even if listed
    projection = tuple(f for f in target.projection if f in schema.public_fields)

    body: list[Statement] = [
        Code(f"const {{ {target.request_field}, password }} = req.body"),
        EarlyReturn(
            condition=f"!{target.request_field} || !password",
            status=400,
            payload=_failure(target.missing_message),
        ),
        b.query_operation(Operation(
            kind=OperationKind.FIND_UNIQUE,
            entity=target.entity,
            where={target.key_field: Ref(code=target.request_field), **target.active_filter},
            bind=var,
        )),
        EarlyReturn(condition=f"!{var}", status=404, payload=_failure(target.not_found_message)),
    ]

    if target.expiry_field:
        expiry = f"{var}.{target.expiry_field}"
        body.append(EarlyReturn(
            condition=f"{expiry} && new Date() > new Date({expiry})",
            status=403,
            payload=_failure(f"{target.entity} has expired"),
            comment=f"Check if {var} has expired",
        ))

    body += [
        Comment("Verify password"),
        Code(f"const isValidPassword = await bcrypt.compare(password, {var}.{target.secret_field})"),
        EarlyReturn(condition="!isValidPassword", status=401, payload=_failure("Invalid password")),
    ]

    if target.access_log:
        body += [
            Comment(f"Log {var} access"),
            b.query_operation(Operation(
                kind=OperationKind.CREATE,
                entity=target.access_log,
                data={
                    f"{var}Id": Ref(code=f"{var}.id"),
                    "clientIp": Ref(code="req.socket.remoteAddress || 'unknown'"),
                    "userAgent": Ref(code="req.headers['user-agent'] || null"),
                },
                returning=False,
            )),
        ]

    sanitized = tuple((f, f"{var}.{f}") for f in projection)
    body.append(Respond(200, (("success", "true"), (var, sanitized))))

    return _assemble(b, _handler(b, "POST", body))


# ── Tracked download ────────────────────────────────────────────


_MIME_TYPES = """\
const fileExtension = path.extname(image.fileName)
const mimeTypes: { [key: string]: string } = {
  '.jpg': 'image/jpeg',
  '.jpeg': 'image/jpeg',
  '.png': 'image/png',
  '.gif': 'image/gif',
  '.webp': 'image/webp'
}

res.setHeader('Content-Type', mimeTypes[fileExtension.toLowerCase()] || 'application/octet-stream')
res.setHeader('Content-Disposition', `attachment; filename="${image.originalName}"`)
res.setHeader('Content-Length', fileBuffer.length)"""

_DOWNLOAD_ACCESS_NOTE = """\
// Verify gallery access through session or authentication
// This should be implemented based on your authentication strategy"""


def compose_download(b: FragmentBuilder, settings: ScaffoldSettings) -> list[Fragment]:
    """GET: resolve gallery + image, enforce the limit, read, record, send."""
    body: list[Statement] = [
        b.identity_check(_DOWNLOAD_ACCESS_NOTE),
        b.query_operation(Operation(
            kind=OperationKind.FIND_UNIQUE,
            entity="Gallery",
            where={"slug": Ref(code="slug as string"), "isActive": True},
            include={
                "downloads": Include(),
                "images": Include(where={"id": Ref(code="imageId as string")}),
            },
            bind="gallery",
        )),
        EarlyReturn(
            condition="!gallery || gallery.images.length === 0",
            status=404,
            payload=_message("Gallery or image not found"),
        ),
        EarlyReturn(
            condition="gallery.downloads.length >= gallery.downloadLimit",
            status=429,
            payload=_message("Download limit exceeded"),
            comment="Check download limit",
        ),
        Code(
            "const image = gallery.images[0]\n"
            f"const imagePath = path.join(process.cwd(), {_storage_segments(settings)}, "
            "slug as string, path.basename(image.fileName))"
        ),
        EarlyReturn(
            condition="!fs.existsSync(imagePath)",
            status=404,
            payload=_message("Image file not found"),
        ),
        Code("const fileBuffer = fs.readFileSync(imagePath)"),
        Comment("Track download"),
        b.query_operation(Operation(
            kind=OperationKind.CREATE,
            entity="Download",
            data={
                "galleryId": Ref(code="gallery.id"),
                "imageId": Ref(code="image.id"),
                "clientIp": Ref(code="getClientIP(req)"),
                "userAgent": Ref(code="req.headers['user-agent'] || null"),
            },
            returning=False,
        )),
        Code(_MIME_TYPES),
        Respond(200, send="fileBuffer"),
    ]
    preamble = (Code("const { slug, imageId } = req.query"),)
    return _assemble(b, _handler(b, "GET", body, preamble=preamble))


# ── Multipart upload ────────────────────────────────────────────


def compose_upload(b: FragmentBuilder, settings: ScaffoldSettings) -> list[Fragment]:
    """POST: resolve gallery, prepare directories, store files + one record each."""
    url_prefix = _public_url_prefix(settings)

    per_file: tuple[Statement, ...] = (
        Code(
            "const fileName = `${Date.now()}-${path.basename(file.originalName)}`\n"
            "const filePath = path.join(galleryDir, fileName)\n"
            "\n"
            "fs.writeFileSync(filePath, Buffer.from(file.data, 'base64'))"
        ),
        b.query_operation(Operation(
            kind=OperationKind.CREATE,
            entity="GalleryImage",
            data={
                "fileName": Ref(code="fileName"),
                "originalName": Ref(code="file.originalName"),
                "filePath": Ref(code=f"`{url_prefix}/${{gallery.slug}}/${{fileName}}`"),
                "fileSize": Ref(code="file.size"),
                "width": 0,
                "height": 0,
                "galleryId": Ref(code="gallery.id"),
            },
            bind="image",
        )),
        Code("uploadedImages.push(image)"),
    )

    body: list[Statement] = [
        b.identity_check(),
        Comment("Handle multipart form data upload"),
        Code("const { files, gallerySlug } = req.body // Replace with a multipart parser"),
        EarlyReturn(
            condition="!files || files.length === 0",
            status=400,
            payload=_message("No files provided"),
        ),
        EarlyReturn(condition="!gallerySlug", status=400, payload=_message("Gallery slug is required")),
        b.query_operation(Operation(
            kind=OperationKind.FIND_UNIQUE,
            entity="Gallery",
            where={"slug": Ref(code="gallerySlug")},
            bind="gallery",
        )),
        EarlyReturn(condition="!gallery", status=404, payload=_message("Gallery not found")),
        Code(
            "const uploadedImages: unknown[] = []\n"
            f"const galleryDir = path.join(process.cwd(), {_storage_segments(settings)}, gallery.slug)\n"
            "const thumbnailDir = path.join(galleryDir, 'thumbnails')"
        ),
        Comment("Ensure directories exist"),
        Code(
            "fs.mkdirSync(galleryDir, { recursive: true })\n"
            "fs.mkdirSync(thumbnailDir, { recursive: true })"
        ),
        Loop(header="for (const file of files)", body=per_file),
        Respond(200, _message(
            "Images uploaded successfully",
            images="uploadedImages",
            count="uploadedImages.length",
        )),
    ]

    route_config = RouteConfig(body_size_limit=settings.body_size_limit)
    return _assemble(b, _handler(b, "POST", body), route_config=route_config)


# ── Plain read ──────────────────────────────────────────────────


def compose_read(b: FragmentBuilder, settings: ScaffoldSettings) -> list[Fragment]:
    """GET: one enumerate query."""
    resource = b.request.resource
    schema = b.catalog.for_resource(resource)
    plural = variable_name(camel_case(resource))

    body: list[Statement] = [
        b.identity_check(),
        Comment("Add your endpoint logic here"),
        b.query_operation(Operation(kind=OperationKind.FIND_MANY, entity=schema.name, bind=plural)),
        Respond(200, _message("Success", data=plural)),
    ]
    return _assemble(b, _handler(b, "GET", body))


_COMPOSERS = {
    Archetype.CRUD: compose_crud,
    Archetype.CREDENTIAL: compose_credential,
    Archetype.DOWNLOAD: compose_download,
    Archetype.UPLOAD: compose_upload,
    Archetype.READ: compose_read,
}


def compose(b: FragmentBuilder, settings: ScaffoldSettings) -> list[Fragment]:
    """Run the composer for the builder's archetype."""
    logger.debug(
        "Composing %s handler for %s/%s with %s",
        b.archetype.value, b.request.area.value, b.request.resource, b.pattern.name,
    )
    return _COMPOSERS[b.archetype](b, settings)
