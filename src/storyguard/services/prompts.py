STORIES_KNOWLEDGE_PRESET = """
## Instagramストーリーズ基礎知識
- 縦型フルスクリーン（9:16）、静止画5秒/動画最大60秒、24時間で消滅
- 最適枚数は3〜7枚（7枚以上は完走率が大幅低下）
- 1枚目（フック）: 数字・疑問文・意外性で「次を見たい」を作る
- 中盤（共感→教育）: 悩みに寄り添い、解決の糸口を見せる
- 最終枚（CTA）: 「DMで◯◯と送って」「リンクはここ」「保存してね」など行動をひとつに
- 1枚あたりのテキストは40文字以内が理想、多くても60文字
- 85%はミュート視聴。テキストだけで伝わる設計にする
""".strip()

SLIDES_SCHEMA_HINT = """
出力は必ずJSON。自由文禁止。
キー: slides(list)
slides[*]: id(int, 1始まり), role(str), visualGuidance(str), script(str), tips(str)
"""

SKELETON_SCHEMA_HINT = """
出力は必ずJSON。自由文禁止。
キー: template_name(str), category(str), total_slides(int),
skeleton(list[{slide_number:int, role:str, recommended_elements:list[str], copy_pattern:str, visual_instruction:str}]),
summary(object{best_for:str, key_success_factors:list[str]})
"""


def _skeleton_lines(skeleton: dict) -> str:
    rows = []
    for s in skeleton.get("skeleton") or []:
        elements = ", ".join(s.get("recommended_elements") or [])
        rows.append(
            f"  Slide {s.get('slide_number')}: 役割「{s.get('role', '')}」"
            f"/ コピー型「{s.get('copy_pattern', '')}」"
            f"/ 撮影指示「{s.get('visual_instruction', '')}」"
            f"/ 推奨要素: {elements}"
        )
    return "\n".join(rows)


def render_generate_prompt(
    brand: dict,
    pattern_name: str,
    skeleton: dict,
    topic: str,
    vibe: str,
    user_preferences: str | None = None,
) -> str:
    preferences = ""
    if user_preferences:
        preferences = f"""
### 5. ユーザーの好み・修正傾向（過去の成長ログから学習済み）
{user_preferences}
"""

    return f"""
あなたはInstagramストーリーズ台本の専門コピーライター。

{STORIES_KNOWLEDGE_PRESET}

---

### 1. ブランド情報
- ブランド名: {brand.get("name", "")}
- 商品説明: {brand.get("product_description", "")}
- ターゲット: {brand.get("target_audience", "")}
- ブランドトーン: {brand.get("brand_tone", "")}

### 2. 適用する構成パターン（型）
テンプレート名: {pattern_name}
{_skeleton_lines(skeleton)}

### 3. 今日のトピック
{topic}

### 4. 今日のバイブス（雰囲気）
{vibe}
{preferences}
---
{SLIDES_SCHEMA_HINT}
制約:
- script は実際にストーリーズに載せるコピー文（40文字以内推奨）
- visualGuidance は撮影者への具体的な指示（背景、構図、使用素材）
- tips はマーケティング的な補足アドバイス（1文）
- 薬機法・景表法に抵触する断定的表現（「絶対治る」「No.1」等）は禁止
- ブランドトーンと今日のバイブスを反映した文体にする
""".strip()


def render_rewrite_prompt(original_text: str, instruction: str) -> str:
    return f"""
以下の台本テキストを、ユーザーの指示に従ってリライトしてください。

【元のテキスト】
{original_text}

【リライト指示】
{instruction}

リライト後のテキストのみを返してください。説明や補足は不要です。
""".strip()


def render_analysis_prompt(account_name: str, category: str | None, focus_point: str | None) -> str:
    return f"""
あなたはInstagramストーリーズのマーケティング分析専門家。
アップロードされた複数のストーリーズのスクショを、1枚目から順に分析してください。

{STORIES_KNOWLEDGE_PRESET}

分析項目:
1. 各枚の役割
2. コピーライティング（フック、キャッチコピー、CTA）
3. レイアウト・デザイン
4. マーケティング意図（なぜこの順番か）
5. エンゲージメント要素（投票、質問など）

アカウント: {account_name}
業種: {category or "未指定"}
着眼点: {focus_point or "なし"}
""".strip()


def render_skeleton_prompt(account_name: str, analysis_text: str) -> str:
    return f"""
あなたはストーリーズの構成パターン（スケルトン）を抽出する専門家。
前段の分析結果を元に、再現可能な「型」としてテンプレート化してください。
{SKELETON_SCHEMA_HINT}
以下の分析結果から「{account_name}さん風テンプレート」を抽出してください。

=== 分析結果 ===
{analysis_text}
""".strip()
