from pydantic import BaseModel


class ImageUploadRequest(BaseModel):
    data_url: str
    file_name: str = "image"


class ImageUploadResponse(BaseModel):
    url: str
    path: str


class ImageDeleteRequest(BaseModel):
    path: str
