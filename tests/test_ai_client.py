import base64
import pytest
from unittest.mock import MagicMock
from PIL import Image
from visionbulk.core.ai_client import GenAIClient, ImageGenerationError, to_data_url

@pytest.fixture
def ai_client(mock_genai_client):
    return GenAIClient()

def _image_response(mock_genai_client, parts):
    mock_instance = mock_genai_client.return_value
    mock_response = MagicMock()
    mock_response.parts = parts
    mock_instance.models.generate_content.return_value = mock_response
    return mock_instance

class TestGenAIClient:
    def test_generate_text(self, ai_client, mock_genai_client):
        mock_instance = mock_genai_client.return_value
        mock_response = MagicMock()
        mock_response.text = "Generated text"
        mock_instance.models.generate_content.return_value = mock_response

        text = ai_client.generate_text("prompt")

        assert text == "Generated text"
        mock_instance.models.generate_content.assert_called_once()
        args, kwargs = mock_instance.models.generate_content.call_args
        assert kwargs['model'] == ai_client.text_model_name
        assert kwargs['config'] == {}

    def test_generate_text_with_schema(self, ai_client, mock_genai_client):
        mock_instance = mock_genai_client.return_value
        mock_response = MagicMock()
        mock_response.text = '{"key": "value"}'
        mock_instance.models.generate_content.return_value = mock_response

        schema = MagicMock()
        text = ai_client.generate_text("prompt", schema=schema)

        assert text == '{"key": "value"}'
        args, kwargs = mock_instance.models.generate_content.call_args
        assert kwargs['config']['response_mime_type'] == 'application/json'
        assert kwargs['config']['response_schema'] == schema

    def test_generate_text_exception(self, ai_client, mock_genai_client):
        mock_instance = mock_genai_client.return_value
        mock_instance.models.generate_content.side_effect = Exception("API Error")

        with pytest.raises(Exception, match="API Error"):
            ai_client.generate_text("prompt")

    def test_generate_image_inline_data(self, ai_client, mock_genai_client):
        mock_part = MagicMock()
        mock_part.inline_data.data = b"fake_image_bytes"
        mock_part.inline_data.mime_type = "image/jpeg"
        mock_instance = _image_response(mock_genai_client, [mock_part])

        result = ai_client.generate_image("prompt", aspect_ratio="9:16")

        assert result == "data:image/jpeg;base64," + base64.b64encode(b"fake_image_bytes").decode()
        args, kwargs = mock_instance.models.generate_content.call_args
        assert kwargs['model'] == ai_client.image_model_name
        assert kwargs['contents'] == ["prompt"]
        assert kwargs['config'].response_modalities == ['IMAGE']
        assert kwargs['config'].image_config.aspect_ratio == "9:16"

    def test_generate_image_skips_text_parts(self, ai_client, mock_genai_client):
        text_part = MagicMock(spec=['text'])
        image_part = MagicMock()
        image_part.inline_data.data = b"img"
        image_part.inline_data.mime_type = None
        _image_response(mock_genai_client, [text_part, image_part])

        assert ai_client.generate_image("prompt") == to_data_url(b"img", "image/png")

    def test_generate_image_as_image_fallback(self, ai_client, mock_genai_client):
        mock_part = MagicMock()
        mock_part.inline_data = None
        mock_part.as_image.return_value = Image.new("RGB", (2, 2), "blue")
        _image_response(mock_genai_client, [mock_part])

        result = ai_client.generate_image("prompt")

        assert result.startswith("data:image/png;base64,")
        assert base64.b64decode(result.split(",", 1)[1]).startswith(b"\x89PNG")

    @pytest.mark.parametrize("parts", [[], None])
    def test_generate_image_without_image(self, ai_client, mock_genai_client, parts):
        _image_response(mock_genai_client, parts)

        with pytest.raises(ImageGenerationError, match="No image data received"):
            ai_client.generate_image("prompt")

    def test_generate_image_api_error(self, ai_client, mock_genai_client):
        mock_genai_client.return_value.models.generate_content.side_effect = Exception("Quota")

        with pytest.raises(Exception, match="Quota"):
            ai_client.generate_image("prompt")
